"""Strategy definitions, evaluation and spell compilation."""
from . import liquity, reflexer
from .compiler import compile_spells, operation
from .definition import Strategy
from .evaluator import ComponentEvaluator, Evaluation, EvaluationState, evaluate

# Registry of strategies keyed by their CLI/host key.
STRATEGIES: dict[str, Strategy] = {
    strategy.key: strategy
    for strategy in (
        liquity.DEPOSIT_BORROW,
        liquity.BORROW_STABILITY_DEPOSIT,
        reflexer.DEPOSIT_BORROW,
    )
}


def get_strategy(key: str) -> Strategy:
    try:
        return STRATEGIES[key]
    except KeyError:
        raise KeyError(
            f"Unknown strategy '{key}'. Known: {', '.join(sorted(STRATEGIES))}"
        ) from None


__all__ = [
    "STRATEGIES",
    "ComponentEvaluator",
    "Evaluation",
    "EvaluationState",
    "Strategy",
    "compile_spells",
    "evaluate",
    "get_strategy",
    "operation",
]
