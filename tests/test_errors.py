from mongowire.errors import WireError, ZeroReadError


def test_root_message_without_cause():
    err = WireError("kind 0 section has identifier")
    assert err.root_message() == "kind 0 section has identifier"


def test_root_message_follows_cause_chain():
    inner = WireError("OP_MSG checksum does not match contents.")
    middle = WireError("outer")
    middle.__cause__ = inner
    outer = WireError("outermost")
    outer.__cause__ = middle
    assert str(outer) == "outermost"
    assert outer.root_message() == "OP_MSG checksum does not match contents."


def test_root_message_reaches_foreign_cause():
    err = WireError("while checking")
    err.__cause__ = ValueError("NaN is not supported")
    assert err.root_message() == "NaN is not supported"


def test_root_message_ignores_implicit_context():
    err = WireError("visible")
    err.__context__ = ValueError("hidden")
    assert err.root_message() == "visible"


def test_zero_read_default_message():
    err = ZeroReadError()
    assert str(err) == "zero bytes read"
    assert err.root_message() == "zero bytes read"


def test_zero_read_is_a_wire_error():
    err = ZeroReadError()
    assert isinstance(err, WireError)
    assert WireError.root_message(err) == "zero bytes read"


def test_wrapped_zero_read_root_message():
    inner = ZeroReadError()
    err = WireError("reading header")
    err.__cause__ = inner
    assert str(err) == "reading header"
    assert err.root_message() == "zero bytes read"