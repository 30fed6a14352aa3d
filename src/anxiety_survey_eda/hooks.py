import structlog
from kedro.framework.hooks import hook_impl


def configure_logging() -> None:
    """Structured JSON events with ISO timestamps for every node."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ]
    )


class StructlogHooks:
    @hook_impl
    def after_context_created(self, context) -> None:
        configure_logging()

    @hook_impl
    def before_node_run(self, node) -> None:
        structlog.contextvars.bind_contextvars(node=node.name)

    @hook_impl
    def after_node_run(self, node) -> None:
        structlog.contextvars.unbind_contextvars("node")
