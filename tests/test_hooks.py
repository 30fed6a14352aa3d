import structlog
from kedro.pipeline import node

from anxiety_survey_eda.hooks import StructlogHooks


def _identity(x):
    return x


def test_node_name_bound_while_node_runs():
    hooks = StructlogHooks()
    run_node = node(_identity, inputs="a", outputs="b", name="identity_node")

    hooks.before_node_run(node=run_node)
    assert structlog.contextvars.get_contextvars()["node"] == "identity_node"

    hooks.after_node_run(node=run_node)
    assert "node" not in structlog.contextvars.get_contextvars()


def test_events_rendered_as_json(capsys):
    StructlogHooks().after_context_created(context=None)
    structlog.get_logger("anxiety_survey_eda").info("survey_loaded", rows=3)

    line = capsys.readouterr().out.strip().splitlines()[-1]
    assert '"event": "survey_loaded"' in line
    assert '"rows": 3' in line
    assert '"level": "info"' in line
    assert '"timestamp"' in line
