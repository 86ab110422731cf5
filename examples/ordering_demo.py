"""Demonstration of validating and ordering a set of interdependent stacks.

This example builds a small graph of infrastructure stacks, checks it for
cycles and prints the order in which they can be applied. Run it with
``python examples/ordering_demo.py`` after installing the package.
"""

from rundag import DAG, CycleDetectedError
from rundag.config import load_config
from rundag.graph import render
from rundag.log_config import bind_graph_name, clear_context, get_logger


def build_stacks() -> DAG[dict[str, str]]:
    """Declare stacks with the stacks they must come after."""
    dag: DAG[dict[str, str]] = DAG.from_config(load_config())

    # "after" points at the stacks that must be applied first
    dag.add_node("app", {"path": "stacks/app"}, after=["network", "database"])
    dag.add_node("database", {"path": "stacks/database"}, after=["network"])
    dag.add_node("network", {"path": "stacks/network"})
    dag.add_node("monitoring", {"path": "stacks/monitoring"}, before=["app"])
    return dag


def main() -> None:
    """Validate the demo graph and print its ordering."""
    config = load_config()
    config.apply_logging()
    logger = get_logger(__name__)
    bind_graph_name("demo-stacks")

    dag = build_stacks()
    try:
        dag.validate()
    except CycleDetectedError as e:
        logger.error("demo_graph_invalid", reason=e.reason)
        clear_context()
        return

    for position, stack in enumerate(dag.order(), 1):
        print(f"{position}. {stack} ({dag.node(stack)['path']})")

    print()
    print(render(dag, "mermaid"))

    # closing the loop makes the graph unsatisfiable
    dag.add_node("cleanup", {"path": "stacks/cleanup"}, before=["network"], after=["app"])
    logger.info("cleanup_added", has_cycle=dag.has_cycle("network"))
    clear_context()


if __name__ == "__main__":
    main()
