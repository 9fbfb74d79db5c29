# gui/dialog.py
from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional
from PySide6 import QtWidgets

from edotuner.config import load_config, get_history_capacity, get_offset_limit, get_offset_decimals, get_log_level
from edotuner.errors import TuningError
from edotuner.persist import load_document, save_document
from edotuner.pitch import FIELD_ORDER, FIELD_TO_INDEX, SIMPLE_NAMES
from edotuner.state import TuningSession
from edotuner.temperaments import TEMPERAMENTS
from edotuner.util.cents import format_cents, parse_cents_edit

__all__ = ["TuningDialog", "main"]

logger = logging.getLogger(__name__)

# ---------------- UI-Panels ----------------

class TemperamentPanel(QtWidgets.QGroupBox):
    """Radio-Buttons je Temperatur."""
    def __init__(self, title: str, parent=None):
        super().__init__(title, parent)
        lay = QtWidgets.QHBoxLayout(self)
        self.group = QtWidgets.QButtonGroup(self)
        self.buttons: Dict[str, QtWidgets.QRadioButton] = {}
        for i, (name, table) in enumerate(TEMPERAMENTS.items()):
            rb = QtWidgets.QRadioButton(table.label or name)
            self.group.addButton(rb, i)
            self.buttons[name] = rb
            lay.addWidget(rb)
        lay.addStretch(1)

    def select(self, name: str):
        rb = self.buttons.get(name)
        if rb is not None:
            self.group.blockSignals(True)
            rb.setChecked(True)
            self.group.blockSignals(False)

    def name_for(self, button_id: int) -> str:
        return list(self.buttons)[button_id]


class OffsetsPanel(QtWidgets.QGroupBox):
    """21 Offset-Felder, Zeilen = Stammtöne, Spalten = b / ♮ / #."""
    def __init__(self, title: str, decimals: int, parent=None):
        super().__init__(title, parent)
        grid = QtWidgets.QGridLayout(self)
        self.fields: Dict[int, QtWidgets.QLineEdit] = {}  # simple index -> Feld
        for pos, (name, idx) in enumerate(zip(FIELD_ORDER, FIELD_TO_INDEX)):
            row, col = divmod(pos, 3)
            ed = QtWidgets.QLineEdit(format_cents(0.0, decimals))
            ed.setMaximumWidth(70)
            cell = QtWidgets.QHBoxLayout()
            cell.addWidget(QtWidgets.QLabel(name))
            cell.addWidget(ed)
            grid.addLayout(cell, row, col)
            self.fields[idx] = ed


class TuningDialog(QtWidgets.QDialog):
    def __init__(self, session: TuningSession, cfg: Optional[dict] = None, parent=None):
        super().__init__(parent)
        self.setWindowTitle("edotuner – EDO Tuning")
        self.session = session
        cfg = cfg or {}
        self.limit = get_offset_limit(cfg)
        self.decimals = get_offset_decimals(cfg)
        self._path: Optional[Path] = None

        root = QtWidgets.QVBoxLayout(self)

        self.pnl_temp = TemperamentPanel("Temperament", self)
        root.addWidget(self.pnl_temp)

        form = QtWidgets.QFormLayout()
        self.cmb_root = QtWidgets.QComboBox(); self.cmb_root.addItems(SIMPLE_NAMES)
        self.cmb_pure = QtWidgets.QComboBox(); self.cmb_pure.addItems(SIMPLE_NAMES)
        self.ed_tweak = QtWidgets.QLineEdit(format_cents(0.0, self.decimals))
        form.addRow("Root:", self.cmb_root)
        form.addRow("Pure tone:", self.cmb_pure)
        form.addRow("Tweak (cents):", self.ed_tweak)
        root.addLayout(form)

        self.pnl_offsets = OffsetsPanel("Final offsets (cents)", self.decimals, self)
        root.addWidget(self.pnl_offsets)

        # Buttons
        row = QtWidgets.QHBoxLayout()
        self.btn_undo = QtWidgets.QPushButton("Undo")
        self.btn_redo = QtWidgets.QPushButton("Redo")
        self.btn_load = QtWidgets.QPushButton("Load…")
        self.btn_save = QtWidgets.QPushButton("Save…")
        self.btn_reset = QtWidgets.QPushButton("Reset")
        self.btn_close = QtWidgets.QPushButton("Close")
        for b in (self.btn_undo, self.btn_redo, self.btn_load, self.btn_save, self.btn_reset):
            row.addWidget(b)
        row.addStretch(1)
        row.addWidget(self.btn_close)
        root.addLayout(row)

        self.lbl_status = QtWidgets.QLabel("")
        root.addWidget(self.lbl_status)

        # wiring
        self.pnl_temp.group.idClicked.connect(self.on_temperament_clicked)
        self.cmb_root.activated.connect(self.on_root_activated)
        self.cmb_pure.activated.connect(self.on_pure_activated)
        self.ed_tweak.editingFinished.connect(self.on_tweak_edited)
        for idx, ed in self.pnl_offsets.fields.items():
            ed.editingFinished.connect(lambda i=idx: self.on_offset_edited(i))
        self.btn_undo.clicked.connect(self.on_undo)
        self.btn_redo.clicked.connect(self.on_redo)
        self.btn_load.clicked.connect(self.on_load)
        self.btn_save.clicked.connect(self.on_save)
        self.btn_reset.clicked.connect(self.on_reset)
        self.btn_close.clicked.connect(self.reject)

        self.session.subscribe(self.on_state_changed)
        self._repopulate()

    # ---- Anzeige (Observer)

    def _repopulate(self):
        st = self.session.state
        for name in ("temperament", "root", "pure_tone", "tweak", "final_offsets", "modified"):
            value = st.temperament if name == "temperament" else getattr(st, name)
            self.on_state_changed(name, value)

    def on_state_changed(self, name: str, value: Any):
        if name == "temperament":
            self.pnl_temp.select(value.name)
        elif name == "root":
            self._set_combo(self.cmb_root, value)
        elif name == "pure_tone":
            self._set_combo(self.cmb_pure, value)
        elif name == "tweak":
            self.ed_tweak.setText(format_cents(value, self.decimals))
        elif name == "final_offset":
            idx, cents = value
            self.pnl_offsets.fields[idx].setText(format_cents(cents, self.decimals))
        elif name == "final_offsets":
            for idx, cents in enumerate(value):
                self.pnl_offsets.fields[idx].setText(format_cents(cents, self.decimals))
        elif name == "modified":
            title = "edotuner – EDO Tuning"
            self.setWindowTitle(title + (" *" if value else ""))
        self._update_buttons()

    def _set_combo(self, cmb: QtWidgets.QComboBox, index: int):
        cmb.blockSignals(True)
        cmb.setCurrentIndex(int(index))
        cmb.blockSignals(False)

    def _update_buttons(self):
        self.btn_undo.setEnabled(self.session.can_undo())
        self.btn_redo.setEnabled(self.session.can_redo())

    def _error(self, title: str, e: Exception):
        QtWidgets.QMessageBox.critical(self, title, str(e))

    # ---- Slots

    def on_temperament_clicked(self, button_id: int):
        name = self.pnl_temp.name_for(button_id)
        if name != self.session.state.temperament.name:
            self.session.select_temperament(name)

    def on_root_activated(self, index: int):
        self.session.select_root(index)

    def on_pure_activated(self, index: int):
        self.session.select_pure_tone(index)

    def on_tweak_edited(self):
        st = self.session.state
        try:
            value = parse_cents_edit(self.ed_tweak.text(), st.tweak, self.limit, self.decimals)
        except ValueError as e:
            self.ed_tweak.setText(format_cents(st.tweak, self.decimals))
            self.lbl_status.setText(str(e))
            return
        if value is not None:
            self.session.edit_tweak(value)

    def on_offset_edited(self, idx: int):
        ed = self.pnl_offsets.fields[idx]
        current = self.session.state.final_offsets[idx]
        try:
            value = parse_cents_edit(ed.text(), current, self.limit, self.decimals)
        except ValueError as e:
            ed.setText(format_cents(current, self.decimals))
            self.lbl_status.setText(str(e))
            return
        if value is not None:
            self.session.edit_final_offset(idx, value)

    def on_undo(self):
        label = self.session.undo()
        self.lbl_status.setText(f"Undo: {label}" if label else "")

    def on_redo(self):
        label = self.session.redo()
        self.lbl_status.setText(f"Redo: {label}" if label else "")

    def on_reset(self):
        self.session.select_temperament(self.session.state.temperament)

    def on_load(self):
        path, _ = QtWidgets.QFileDialog.getOpenFileName(self, "Load tuning", "", "JSON (*.json);;All files (*)")
        if not path:
            return
        try:
            doc = load_document(Path(path))
        except TuningError as e:
            self._error("Load error", e)
            return
        self.session.load_document(doc)
        self._path = Path(path)
        self.lbl_status.setText(f"Loaded {self._path.name}")

    def on_save(self):
        start = str(self._path) if self._path else "tuning.json"
        path, _ = QtWidgets.QFileDialog.getSaveFileName(self, "Save tuning", start, "JSON (*.json);;All files (*)")
        if not path:
            return
        try:
            save_document(Path(path), self.session.to_document())
        except OSError as e:
            self._error("Save error", e)
            return
        self.session.mark_saved()
        self._path = Path(path)
        self.lbl_status.setText(f"Saved {self._path.name}")

    def done(self, result: int):
        self.session.unsubscribe(self.on_state_changed)
        super().done(result)


def main():
    cfg = load_config()
    logging.basicConfig(level=get_log_level(cfg))
    app = QtWidgets.QApplication(sys.argv)
    session = TuningSession(capacity=get_history_capacity(cfg))
    dlg = TuningDialog(session, cfg=cfg)
    dlg.show()
    sys.exit(app.exec())

if __name__ == "__main__":
    main()
