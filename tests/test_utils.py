import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import utils


class StreamlitStub:
    def __init__(self):
        self.session_state = {}


def test_initialize_session_state_keeps_existing_values(monkeypatch):
    st_stub = StreamlitStub()
    st_stub.session_state["results_available"] = True
    monkeypatch.setattr(utils, "st", st_stub)

    utils.initialize_session_state()

    assert st_stub.session_state["results_available"] is True
    assert st_stub.session_state["calculator_expanded"] is True
    assert st_stub.session_state["results_expanded"] is False
    assert st_stub.session_state["last_inputs"] == {}
    assert st_stub.session_state["history_summary"] is None


def test_fmt_money_escapes_dollar_sign():
    assert utils.fmt_money(1234567.891) == "\\$1,234,567.89"


def test_fmt_btc():
    assert utils.fmt_btc(10.794625) == "₿10.7946"
    assert utils.fmt_btc(None) == "price unavailable"
