"""Kubernetes label selector matching."""


def format_label_selector(selector: dict[str, str]) -> str:
    """
    Convert a label selector dict to the Kubernetes selector string.

    Returns:
        Comma-separated string like "app=nginx,env=prod"
    """
    return ",".join(f"{k}={v}" for k, v in sorted(selector.items()))


def matches_labels(selector: dict[str, str] | None, labels: dict[str, str] | None) -> bool:
    """
    Check an equality-based selector (Service style) against labels.

    An empty or missing selector matches nothing, which is how Services
    without a selector behave.
    """
    if not selector:
        return False

    labels = labels or {}
    return all(labels.get(k) == v for k, v in selector.items())
