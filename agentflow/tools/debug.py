"""Tool debug sink that records executions as readable debug lines."""

MAX_RESPONSE_LENGTH = 200


class ToolDebugCollector:
    """Collects tool execution notes for one turn.

    The chat orchestrator drains the collected entries and appends them to the
    conversation as system messages when tool debugging is enabled.
    """

    def __init__(self):
        self.entries: list[str] = []

    def on_tool_executed(self, tool_name: str, toolset_id: str, arguments: str, response: str) -> None:
        self.entries.append(
            f"🔧 Tool Executed: {tool_name} from {toolset_id}\n"
            f"Parameters: {arguments}\n"
            f"Result: {_truncate(response)}"
        )

    def on_tool_error(self, tool_name: str, toolset_id: str, error: str) -> None:
        self.entries.append(f"❌ Tool Error: {tool_name} from {toolset_id}\nError: {error}")

    def drain(self) -> list[str]:
        """Return collected entries and reset the collector."""
        entries, self.entries = self.entries, []
        return entries


def _truncate(response: str) -> str:
    if len(response) <= MAX_RESPONSE_LENGTH:
        return response
    return response[:MAX_RESPONSE_LENGTH] + "..."
