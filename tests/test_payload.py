import json

import discord

from slashgram.payload import build_payload, encode_payload, to_builtins


def noop(event) -> None:
    return None


def test_root_arguments(build) -> None:
    spec = (
        build("ping", "Ping the bot")
        .argument("<count: 1 < x < 5>", description="How many")
        .argument("[color: red | blue]")
        .argument("[where: voice channel]")
        .action(noop)
    )
    data = to_builtins(spec.payload)

    assert data["name"] == "ping"
    assert data["description"] == "Ping the bot"
    assert data["type"] == 1
    count, color, where = data["options"]
    assert count == {
        "type": discord.SlashCommandOptionType.integer.value,
        "name": "count",
        "description": "How many",
        "required": True,
        "min_value": 1,
        "max_value": 5,
    }
    assert color["required"] is False
    assert color["choices"] == [
        {"name": "red", "value": "red"},
        {"name": "blue", "value": "blue"},
    ]
    assert where["type"] == discord.SlashCommandOptionType.channel.value
    assert where["channel_types"] == [discord.ChannelType.voice.value]
    assert "autocomplete" not in count


def test_subgroups_and_subcommands(build) -> None:
    spec = (
        build("tags")
        .subgroup("group", "Manage groups")
        .arguments(["group add <*name: l < 20>", "set [value: float]"])
        .action(noop)
    )
    options = to_builtins(spec.payload)["options"]

    group, sub = options
    assert group["type"] == discord.SlashCommandOptionType.sub_command_group.value
    assert group["description"] == "Manage groups"
    (add,) = group["options"]
    assert add["type"] == discord.SlashCommandOptionType.sub_command.value
    assert add["options"][0]["autocomplete"] is True
    assert add["options"][0]["max_length"] == 20
    assert sub["type"] == discord.SlashCommandOptionType.sub_command.value
    assert sub["name"] == "set"
    assert sub["options"][0]["type"] == discord.SlashCommandOptionType.number.value


def test_localizations_are_emitted(build) -> None:
    spec = (
        build("hi")
        .argument("<who>")
        .docs({"who": {"default": "Who to greet", "fr": "Qui saluer"}})
        .action(noop)
    )
    (who,) = to_builtins(spec.payload)["options"]
    assert who["description"] == "Who to greet"
    assert who["description_localizations"] == {"fr": "Qui saluer"}
    assert "description_localizations" not in to_builtins(spec.payload)


def test_encode_payload(build) -> None:
    builder = build("hi", "Hello").argument("<who>")
    payload = builder.compile()
    assert json.loads(encode_payload(payload)) == to_builtins(build_payload(builder.spec))
