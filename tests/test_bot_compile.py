import py_compile
from pathlib import Path


def test_bot_and_main_compile() -> None:
    """The Discord-facing modules should at least be syntactically valid.

    Compiling them here catches a broken module without requiring the
    ``discord`` package or a bot token.
    """

    for module in (
        "ride_dispatch_bot/bot.py",
        "ride_dispatch_bot/main.py",
        "ride_dispatch_bot/ui/views.py",
        "ride_dispatch_bot/ui/modals.py",
        "ride_dispatch_bot/commands/register.py",
    ):
        py_compile.compile(Path(module), doraise=True)
