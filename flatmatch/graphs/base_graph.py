"""Shared plumbing for the LangGraph pipelines in this package."""

from __future__ import annotations

from abc import ABC, abstractmethod
from langgraph.graph import StateGraph

from flatmatch.utils.errors import GraphExecutionError
from flatmatch.utils.logging_config import logger


class BaseGraph(ABC):
    """Builds a StateGraph once and runs it with uniform error handling.

    Subclasses only declare nodes and edges in ``build_graph``. Node
    failures that a subclass does not handle itself surface from ``run``
    as GraphExecutionError.
    """

    name = "graph"

    def __init__(self, timeout: int = 30):
        self.timeout = timeout
        self.logger = logger
        self._compiled = None

    @abstractmethod
    def build_graph(self) -> StateGraph:
        """Build and return the StateGraph instance."""

    def _log_node_execution(self, node_name: str, state: dict) -> None:
        self.logger.debug(
            "%s node=%s viewer=%s", self.name, node_name, state.get("viewer_id")
        )

    def _log_node_error(self, node_name: str, error: Exception) -> None:
        # Ids only, never profile contents.
        self.logger.error("%s node %s failed: %s", self.name, node_name, str(error))

    def compile(self):
        """Compile the graph on first use and reuse it afterwards."""

        if self._compiled is None:
            try:
                compiled = self.build_graph().compile()
            except Exception as exc:
                raise GraphExecutionError(f"{self.name} failed to compile: {exc}") from exc
            compiled.step_timeout = self.timeout
            self._compiled = compiled
        return self._compiled

    def run(self, state: dict) -> dict:
        """Invoke the compiled graph and return its final state."""

        graph = self.compile()
        try:
            return graph.invoke(state)
        except Exception as exc:
            self.logger.error("%s execution failed: %s", self.name, str(exc))
            raise GraphExecutionError(f"{self.name} failed: {exc}") from exc
