import asyncio
import sys
import types
from decimal import Decimal


def stub_discord(monkeypatch):
    """Provide a minimal discord package for command registration."""
    discord = types.ModuleType("discord")

    class Embed:
        def __init__(self, *args, **kwargs):
            self.title = kwargs.get("title")
            self.fields = []
        def add_field(self, *, name, value, inline=True):
            self.fields.append((name, value))
    discord.Embed = Embed

    class ButtonStyle:
        success = 1
        primary = 2
        danger = 3
    discord.ButtonStyle = ButtonStyle

    # UI module ---------------------------------------------------------
    ui = types.ModuleType("discord.ui")

    class View:
        def __init__(self, *args, **kwargs):
            self.children = []
        def add_item(self, item):
            self.children.append(item)
    ui.View = View

    class Button:
        def __init__(self, *args, **kwargs):
            self.label = kwargs.get("label")
            self.callback = None
    ui.Button = Button

    class Modal:
        def __init__(self, *args, **kwargs):
            self.children = []
        def add_item(self, item):
            self.children.append(item)
        def __init_subclass__(cls, **kwargs):
            pass
    ui.Modal = Modal

    class TextInput:
        def __init__(self, *args, **kwargs):
            self.label = kwargs.get("label")
            self.value = ""
    ui.TextInput = TextInput

    discord.ui = ui

    # app_commands module ----------------------------------------------
    app_commands = types.ModuleType("discord.app_commands")

    class Choice:
        def __init__(self, name: str, value):
            self.name = name
            self.value = value
    app_commands.Choice = Choice

    def describe(**_kwargs):
        def decorator(func):
            return func
        return decorator
    app_commands.describe = describe

    class Command:
        def __init__(self, callback, name: str, description: str):
            self.callback = callback
            self.name = name
            self.description = description
            self.autocomplete_callbacks = {}
        def autocomplete(self, param: str):
            def decorator(func):
                self.autocomplete_callbacks[param] = func
                return func
            return decorator

    class CommandTree:
        def __init__(self):
            self.commands = {}
        def command(self, *, name: str, description: str):
            def decorator(func):
                cmd = Command(func, name, description)
                self.commands[name] = cmd
                return cmd
            return decorator
    app_commands.CommandTree = CommandTree

    discord.app_commands = app_commands

    # Command system ----------------------------------------------------
    ext = types.ModuleType("discord.ext")
    commands_mod = types.ModuleType("discord.ext.commands")
    class Bot:
        def __init__(self, *args, **kwargs):
            self.tree = CommandTree()
    commands_mod.Bot = Bot
    ext.commands = commands_mod
    discord.ext = ext

    monkeypatch.setitem(sys.modules, "discord", discord)
    monkeypatch.setitem(sys.modules, "discord.ui", ui)
    monkeypatch.setitem(sys.modules, "discord.ext", ext)
    monkeypatch.setitem(sys.modules, "discord.ext.commands", commands_mod)
    monkeypatch.setitem(sys.modules, "discord.app_commands", app_commands)
    for name in (
        "ride_dispatch_bot.commands.register",
        "ride_dispatch_bot.ui.modals",
        "ride_dispatch_bot.ui.views",
    ):
        monkeypatch.delitem(sys.modules, name, raising=False)

    return discord


class Response:
    def __init__(self):
        self.messages = []
        self.modal = None
    async def send_message(self, content=None, **kwargs):
        self.messages.append((content, kwargs))
    async def send_modal(self, modal):
        self.modal = modal


def interaction(user_id):
    return types.SimpleNamespace(
        user=types.SimpleNamespace(id=user_id), response=Response()
    )


class RecordingAdapter:
    def __init__(self):
        self.sent = []
    async def send_message(self, channel_id, content):
        self.sent.append((channel_id, content))
    async def send_direct_message(self, user_id, content):
        self.sent.append((user_id, content))


def build(monkeypatch, tmp_path):
    discord = stub_discord(monkeypatch)

    from ride_dispatch_bot.commands.register import register_commands
    from ride_dispatch_bot.core.directory import DriverDirectory
    from ride_dispatch_bot.core.storage import JSONStorage
    from ride_dispatch_bot.data.models import Offer
    from ride_dispatch_bot.dispatch.coordinator import DispatchCoordinator
    from ride_dispatch_bot.dispatch.service import DispatchService
    from ride_dispatch_bot.messaging.gateway import MessagingGateway
    from ride_dispatch_bot.onboarding import OnboardingWizard

    storage = JSONStorage(tmp_path / "data.json")
    directory = DriverDirectory(storage)
    directory.add_driver("1", "Ana", "ANA-0001")
    directory.add_driver("2", "Beto", "BET-0002")
    adapter = RecordingAdapter()
    service = DispatchService(
        DispatchCoordinator(directory),
        MessagingGateway(adapter, directory),
        storage=storage,
    )
    wizard = OnboardingWizard(directory)

    bot = discord.ext.commands.Bot()
    register_commands(bot, service, wizard)

    offer = Offer(
        id="R1",
        requester_id="user-9",
        origin="Centro",
        destination="Aeropuerto",
        weight="2kg",
        category="moto",
        price_quote=Decimal("50"),
        distance_km=12,
    )
    asyncio.run(service.offer_created(offer))
    return bot, service, adapter, directory


def test_accept_and_terminate(monkeypatch, tmp_path):
    bot, service, adapter, _ = build(monkeypatch, tmp_path)
    commands = bot.tree.commands

    winner = interaction(1)
    asyncio.run(commands["accept"].callback(winner, " R1 "))
    reply, kwargs = winner.response.messages[0]
    assert "You accepted ride `R1`" in reply
    assert kwargs == {"ephemeral": True}
    assert ("2", "❌ Ride `R1` was already taken.") in adapter.sent

    loser = interaction(2)
    asyncio.run(commands["accept"].callback(loser, "R1"))
    assert loser.response.messages[0][0] == "❌ The ride was already taken."

    stranger = interaction(2)
    asyncio.run(commands["terminate"].callback(stranger))
    assert stranger.response.messages[0][0] == "❌ You have no ride in progress."

    done = interaction(1)
    asyncio.run(commands["terminate"].callback(done))
    assert "marked as completed" in done.response.messages[0][0]
    assert service.coordinator.get("R1") is None


def test_offers_lists_buttons_that_accept(monkeypatch, tmp_path):
    bot, service, _, _ = build(monkeypatch, tmp_path)
    commands = bot.tree.commands

    listing = interaction(1)
    asyncio.run(commands["offers"].callback(listing))
    _, kwargs = listing.response.messages[0]
    assert [name for name, _ in kwargs["embed"].fields] == [
        "R1: Centro → Aeropuerto"
    ]
    button = kwargs["view"].children[0]
    assert button.label == "Accept R1 ($31.30)"

    clicked = interaction(1)
    asyncio.run(button.callback(clicked))
    assert "You accepted ride `R1`" in clicked.response.messages[0][0]

    # nothing left to offer
    empty = interaction(2)
    asyncio.run(commands["offers"].callback(empty))
    assert empty.response.messages[0][0] == "❌ There are no rides available."


def test_accept_autocomplete(monkeypatch, tmp_path):
    bot, _, _, _ = build(monkeypatch, tmp_path)
    complete = bot.tree.commands["accept"].autocomplete_callbacks["offer_id"]

    choices = asyncio.run(complete(interaction(1), "r"))
    assert [c.value for c in choices] == ["R1"]
    assert asyncio.run(complete(interaction(1), "zz")) == []
    assert asyncio.run(complete(interaction(99), "")) == []


def test_register_modal(monkeypatch, tmp_path):
    bot, _, _, directory = build(monkeypatch, tmp_path)
    commands = bot.tree.commands

    inter = interaction(5)
    asyncio.run(commands["register"].callback(inter))
    modal = inter.response.modal
    assert modal is not None

    modal.name_input.value = "Carla"
    modal.plate_input.value = "AB1"
    bad = interaction(5)
    asyncio.run(modal.on_submit(bad))
    assert bad.response.messages[0][0] == "❌ Invalid plate"
    assert directory.find_by_channel("5") is None

    modal.plate_input.value = "CAR-0005"
    good = interaction(5)
    asyncio.run(modal.on_submit(good))
    assert "Registration complete" in good.response.messages[0][0]
    assert directory.find_by_channel("5").display_name == "Carla"


def test_start_prompts_for_name(monkeypatch, tmp_path):
    bot, _, _, _ = build(monkeypatch, tmp_path)

    inter = interaction(6)
    asyncio.run(bot.tree.commands["start"].callback(inter))
    reply, kwargs = inter.response.messages[0]
    assert "direct message" in reply
    assert kwargs == {"ephemeral": True}


def test_register_modal_reports_storage_failure(monkeypatch, tmp_path):
    bot, _, _, directory = build(monkeypatch, tmp_path)

    from ride_dispatch_bot.onboarding import TECHNICAL_ERROR

    def broken_add_driver(driver):
        raise OSError("read-only file system")

    monkeypatch.setattr(directory.storage, "add_driver", broken_add_driver)

    inter = interaction(8)
    asyncio.run(bot.tree.commands["register"].callback(inter))
    modal = inter.response.modal
    modal.name_input.value = "Dora"
    modal.plate_input.value = "DOR-0008"

    submitted = interaction(8)
    asyncio.run(modal.on_submit(submitted))
    assert submitted.response.messages == [(TECHNICAL_ERROR, {"ephemeral": True})]
    assert directory.find_by_channel("8") is None
