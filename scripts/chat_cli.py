#!/usr/bin/env python3
"""Interactive chat CLI for testing the agentflow service."""

import json
import sys

import httpx
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table


class ChatCLI:
    """Interactive chat interface for the agentflow service."""

    def __init__(self, base_url: str = "http://localhost:8000"):
        """Initialize chat CLI."""
        self.base_url = base_url
        self.conversation_id: str | None = None
        self.show_tools = True
        self.console = Console()
        self.client = httpx.Client(timeout=60.0)

    def start(self) -> None:
        """Start the interactive chat session."""
        self.console.print(
            Panel.fit(
                "[bold blue]🧭 Agentflow - Interactive Chat[/bold blue]\n"
                "Type your messages to chat with the agents.\n"
                "Commands: /help, /agents, /history, /tools, /clear, /quit",
                border_style="blue",
            )
        )

        if not self._test_connection():
            self.console.print(f"[red]❌ Cannot connect to the service at {self.base_url}.[/red]")
            return

        self.console.print("[green]✅ Connected to agentflow service[/green]\n")
        self._show_agents()

        try:
            while True:
                user_input = Prompt.ask("\n[bold cyan]You[/bold cyan]")
                command = user_input.strip().lower()

                if command in ["/quit", "/exit", "quit", "exit"]:
                    break
                elif command == "/help":
                    self._show_help()
                    continue
                elif command == "/agents":
                    self._show_agents()
                    continue
                elif command == "/history":
                    self._show_history()
                    continue
                elif command == "/tools":
                    self.show_tools = not self.show_tools
                    self.console.print(f"[yellow]🔧 Tool details {'on' if self.show_tools else 'off'}[/yellow]")
                    continue
                elif command == "/clear":
                    self._clear_conversation()
                    continue
                elif command == "":
                    continue

                response = self._send_message(user_input)
                if response:
                    self._display_response(response)

        except KeyboardInterrupt:
            pass
        finally:
            self.console.print("\n[yellow]👋 Goodbye![/yellow]")
            self.client.close()

    def _test_connection(self) -> bool:
        """Test connection to the service."""
        try:
            response = self.client.get(f"{self.base_url}/health")
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    def _send_message(self, message: str) -> dict | None:
        """Send message to the service."""
        try:
            payload = {"message": message}
            if self.conversation_id:
                payload["conversation_id"] = self.conversation_id

            self.console.print("[dim]💭 Thinking...[/dim]", end="")

            response = self.client.post(f"{self.base_url}/conversation", json=payload)

            # Clear the "thinking" message
            self.console.print("\r" + " " * 20 + "\r", end="\n")

            if response.status_code == 200:
                data = response.json()
                self.conversation_id = data.get("conversation_id")
                return data

            self.console.print(f"[red]❌ API Error: {response.status_code} - {response.text}[/red]")
            return None

        except httpx.HTTPError as e:
            self.console.print(f"[red]❌ Connection error: {e}[/red]")
            return None

    def _display_response(self, response: dict) -> None:
        """Display the merged response, with tool activity when enabled."""
        if self.show_tools:
            for tool_call, tool_response in zip(
                response.get("tool_calls", []), response.get("tool_responses", []), strict=False
            ):
                status = "✅" if tool_response.get("success") else "❌"
                self.console.print(
                    Panel(
                        f"[bold]{tool_call['name']}[/bold]({json.dumps(tool_call.get('arguments', {}))})\n\n"
                        f"{tool_response.get('content', '')[:500]}",
                        title=f"[magenta]{status} Tool[/magenta]",
                        border_style="magenta",
                    )
                )

        border = "green" if response.get("success", True) else "red"
        agents = ", ".join(response.get("agent_ids", [])) or "Assistant"
        self.console.print(
            Panel(
                Markdown(response.get("response", "No response")),
                title=f"[bold {border}]🤖 {agents}[/bold {border}]",
                border_style=border,
                padding=(1, 2),
            )
        )

        if error := response.get("error_message"):
            self.console.print(f"[red]{error}[/red]")

    def _show_agents(self) -> None:
        """Show configured agents."""
        try:
            response = self.client.get(f"{self.base_url}/agents")
        except httpx.HTTPError as e:
            self.console.print(f"[red]❌ Connection error: {e}[/red]")
            return

        table = Table(title="Agents", border_style="yellow")
        table.add_column("Id")
        table.add_column("Name")
        table.add_column("Priority", justify="right")
        table.add_column("Enabled")
        table.add_column("Tools")

        for agent in response.json():
            table.add_row(
                agent["agent_id"],
                agent["agent_name"],
                str(agent["priority"]),
                "yes" if agent["enabled"] else "no",
                ", ".join(agent["tool_ids"]),
            )

        self.console.print(table)

    def _show_history(self) -> None:
        """Show the messages of the current conversation."""
        if not self.conversation_id:
            self.console.print("[yellow]No conversation yet[/yellow]")
            return

        response = self.client.get(f"{self.base_url}/conversation/{self.conversation_id}")
        for message in response.json().get("messages", []):
            content = message["content"] or ", ".join(call["name"] for call in message.get("tool_calls") or [])
            self.console.print(f"[dim]{message['role']:>9}[/dim] {content[:200]}")

    def _clear_conversation(self) -> None:
        """Delete the current conversation and start over."""
        if self.conversation_id:
            self.client.delete(f"{self.base_url}/conversation/{self.conversation_id}")
        self.conversation_id = None
        self.console.print("[yellow]🔄 Conversation cleared[/yellow]")

    def _show_help(self) -> None:
        """Show help information."""
        help_text = """
[bold]Available Commands:[/bold]
• /help - Show this help message
• /agents - List configured agents
• /history - Show the current conversation
• /tools - Toggle tool call details
• /clear - Delete the conversation and start over
• /quit or /exit - Exit the chat

[bold]Example Conversation:[/bold]
1. "I want to plan a trip to Japan"
2. "Please update my name"
        """

        self.console.print(Panel(help_text.strip(), title="[cyan]❓ Help[/cyan]", border_style="cyan"))


def main():
    """Main entry point for the chat CLI."""
    base_url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"

    chat = ChatCLI(base_url)
    chat.start()


if __name__ == "__main__":
    main()
