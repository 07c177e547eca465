from card_reveal.chat.intent_parser import parse_intent


def test_parse_intent_bare_numbers_toggle():
    intent = parse_intent("2 5, 7")
    assert intent.action == "toggle"
    assert intent.slots == [1, 4, 6]


def test_parse_intent_toggle_command():
    intent = parse_intent("/toggle 9")
    assert intent.action == "toggle"
    assert intent.slots == [8]


def test_parse_intent_share_platform():
    intent = parse_intent("/share Telegram")
    assert intent.action == "share"
    assert intent.command_args["arg"] == "Telegram"


def test_parse_intent_save_without_dir():
    intent = parse_intent("/save")
    assert intent.action == "save"
    assert intent.command_args["arg"] == ""


def test_parse_intent_aliases():
    assert parse_intent("/reset").action == "reset"
    assert parse_intent("/again").action == "reset"
    assert parse_intent("/close").action == "close_modal"
    assert parse_intent("/exit").action == "quit"


def test_parse_intent_blank_and_unknown():
    assert parse_intent("   ").action == "noop"
    assert parse_intent("/dance").action == "unknown"
    assert parse_intent("flip everything").action == "unknown"
