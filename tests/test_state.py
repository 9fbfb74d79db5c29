import pytest
from edotuner.errors import UnsupportedDivision
from edotuner.history import CommandHistory
from edotuner.persist import TuningDocument, parse_document
from edotuner.pitch import FIELD_ORDER, parse_spelling
from edotuner.resolve import resolve_offset
from edotuner.score import ScoreNote
from edotuner.state import TuningSession, TuningState
from edotuner.temperaments import EQUAL12, EQUAL17, EQUAL19


@pytest.fixture
def session():
    return TuningSession()


def test_initial_state(session):
    st = session.state
    assert st.temperament is EQUAL12
    assert st.division == 12
    assert (st.root, st.pure_tone, st.tweak) == (8, 11, 0.0)
    assert st.final_offsets == [0.0] * 21
    assert not st.modified
    assert not session.can_undo()


def test_select_19_and_undo(session):
    session.select_temperament("equal19")
    st = session.state
    assert st.temperament is EQUAL19
    assert st.division == 19
    assert st.final_offsets == list(EQUAL19.offsets)
    assert st.modified
    assert len(session.history) == 1

    seen = []
    session.subscribe(lambda name, value: seen.append((name, value)))
    session.undo()
    assert st.temperament is EQUAL12
    assert st.division == 12
    assert st.final_offsets == [0.0] * 21
    assert not st.modified
    assert ("temperament", EQUAL12) in seen


def test_undo_redo_restores_post_transaction_state(session):
    session.select_temperament("equal17")
    session.select_root(10)
    session.edit_tweak(2.5)
    after = session.state.snapshot()
    session.undo()
    assert session.state.snapshot() != after
    session.redo()
    assert session.state.snapshot() == after


def test_select_root_resets_tweak(session):
    session.select_temperament("equal19")
    session.edit_tweak(3.0)
    session.select_root(9)
    st = session.state
    assert st.root == 9
    assert st.tweak == 0.0
    assert st.final_offsets[st.pure_tone] == 0.0


def test_select_pure_tone_recomputes(session):
    session.select_temperament("equal19")
    c = parse_spelling("C") - 6
    session.select_pure_tone(c)
    assert session.state.final_offsets[c] == 0.0
    assert session.state.final_offsets[11] == pytest.approx(-15.8)


def test_edit_tweak_shifts_all_offsets(session):
    session.select_temperament("equal17")
    before = list(session.state.final_offsets)
    session.edit_tweak(1.5)
    assert session.state.final_offsets == [v + 1.5 for v in before]


def test_edit_final_offset_is_single_step(session):
    session.select_temperament("equal19")
    session.edit_final_offset(2, 12.3)
    assert session.state.final_offsets[2] == 12.3
    session.undo()
    assert session.state.final_offsets[2] == EQUAL19.offsets[2]
    assert session.state.temperament is EQUAL19


def test_recalculate_is_one_command(session):
    session.set_temperament(EQUAL19)
    session.recalculate()
    entry = session.history.entries[session.history.cursor]
    assert len(entry.commands) == 1
    assert entry.label == "recalculate"
    session.undo()
    assert session.state.final_offsets == [0.0] * 21


@pytest.mark.parametrize("name", ["equal12", "equal15", "equal17", "equal19"])
def test_double_accidentals_follow_edits(session, name):
    session.select_temperament(name)
    st = session.state
    for dbl in ("Fbb", "Cbb", "Gbb", "Dbb", "Abb", "Ebb", "Bbb", "F##", "C##", "G##", "D##", "A##", "E##", "B##"):
        pc = parse_spelling(dbl)
        idx = session.resolver().index_for(pc)
        session.edit_final_offset(idx, 33.3)
        assert session.offset_for(pc) == 33.3
        assert resolve_offset(pc, st.temperament, st.root, st.pure_tone, st.tweak, finals=st.final_offsets) == 33.3
        assert session.offset_for(idx + 6) == 33.3
        session.undo()


def test_failed_composite_leaves_state_untouched(session, monkeypatch):
    session.select_temperament("equal19")
    before = session.state.snapshot()
    with pytest.raises(KeyError):
        session.select_temperament("equal31")

    def broken(*args, **kwargs):
        raise UnsupportedDivision(31)

    monkeypatch.setattr("edotuner.state.compute_all", broken)
    with pytest.raises(UnsupportedDivision):
        session.select_root(3)
    assert session.state.snapshot() == before
    assert len(session.history) == 1
    assert not session.can_redo()


def test_observer_receives_diffs(session):
    seen = []
    session.subscribe(lambda name, value: seen.append(name))
    session.edit_final_offset(0, 1.0)
    assert seen == ["final_offset", "modified"]
    session.unsubscribe(seen.append)  # unbekannter Observer: kein Fehler


def test_load_document_scenario(session):
    fields = [round(0.1 * i, 1) for i in range(21)]
    doc = parse_document(
        '{"temperament": "equal17", "root": 10, "pure": 14, "tweak": 1.5, "offsets": %s}' % fields
    )
    session.load_document(doc)
    st = session.state
    assert st.temperament is EQUAL17
    assert st.division == 17
    assert (st.root, st.pure_tone, st.tweak) == (10, 14, 1.5)
    assert not st.modified
    for pos, name in enumerate(FIELD_ORDER):
        assert st.final_offsets[parse_spelling(name) - 6] == fields[pos]
    # 17-EDO: F## -> Ab
    ab = parse_spelling("Ab") - 6
    assert session.offset_for(parse_spelling("F##")) == st.final_offsets[ab]
    assert session.to_document().offsets == st.final_offsets
    session.undo()
    assert st.temperament is EQUAL12


def test_mark_saved_clears_modified(session):
    session.select_temperament("equal15")
    session.mark_saved()
    assert not session.state.modified
    session.undo()
    assert session.state.modified


def test_apply_writes_tuning(session):
    session.select_temperament("equal19")
    notes = [ScoreNote.from_pitch("C"), ScoreNote.from_pitch("F", 2), ScoreNote.from_pitch("A")]
    assert session.apply(notes) == 3
    assert notes[0].tuning == EQUAL19.offsets[8]
    assert notes[1].tuning == EQUAL19.offsets[2]
    assert notes[2].tuning == 0.0


def test_custom_state_and_history_capacity():
    s = TuningSession(state=TuningState(root=3), capacity=2)
    for t in ("equal15", "equal17", "equal19"):
        s.select_temperament(t)
    assert len(s.history) == 2
    s.undo(); s.undo()
    assert s.state.temperament.name == "equal15"
    assert s.undo() is None


def test_to_document_roundtrip(session):
    session.select_temperament("equal19")
    doc = session.to_document()
    assert isinstance(doc, TuningDocument)
    assert doc.temperament is EQUAL19
    assert (doc.root, doc.pure, doc.tweak) == (8, 11, 0.0)


def test_injected_empty_history_is_used():
    h = CommandHistory(capacity=5)
    st = TuningState()
    s = TuningSession(state=st, history=h)
    assert s.history is h
    assert s.state is st
    s.select_temperament("equal19")
    assert len(h) == 1
    assert h.capacity == 5


def test_failed_composite_on_full_history_keeps_all_steps(session, monkeypatch):
    for i in range(30):
        session.edit_final_offset(0, float(i + 1))
    assert len(session.history) == 30

    def broken(*args, **kwargs):
        raise UnsupportedDivision(31)

    monkeypatch.setattr("edotuner.state.compute_all", broken)
    with pytest.raises(UnsupportedDivision):
        session.select_root(3)
    assert len(session.history) == 30
    steps = 0
    while session.undo() is not None:
        steps += 1
    assert steps == 30
    assert session.state.final_offsets[0] == 0.0
