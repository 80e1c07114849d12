"""Command router for mapping slash commands to handlers."""

from enum import Enum
from typing import Optional


class CommandType(Enum):
    """Available slash command types."""

    STATS = "hackathon-stats"
    HELP = "hackathon-help"
    LEADERBOARD = "leaderboard"
    MOTIVATE_NOW = "motivate-now"
    TOGGLE_DAILY_REMINDER = "toggle-daily-reminder"
    REMINDER_STATUS = "reminder-status"
    SHOW_IDEAS = "show-ideas"


ADMIN_COMMANDS = frozenset(
    {CommandType.MOTIVATE_NOW, CommandType.TOGGLE_DAILY_REMINDER, CommandType.SHOW_IDEAS}
)


class CommandRouter:
    """Resolve slash command names to command types."""

    COMMAND_PREFIX = "/"

    def parse_command(self, command: str) -> Optional[CommandType]:
        """
        Resolve a slash command name.

        Args:
            command: The command name as sent by Slack, e.g. ``/leaderboard``.

        Returns:
            CommandType if the command is known, else None.

        Examples:
            >>> CommandRouter().parse_command("/Hackathon-Stats")
            <CommandType.STATS: 'hackathon-stats'>
        """
        if not command:
            return None

        name = command.strip().lower()
        if name.startswith(self.COMMAND_PREFIX):
            name = name[len(self.COMMAND_PREFIX):]

        try:
            return CommandType(name)
        except ValueError:
            return None

    @staticmethod
    def requires_admin(command_type: CommandType) -> bool:
        return command_type in ADMIN_COMMANDS
