from __future__ import annotations
import argparse, logging, pathlib, sys
from . import persist
from .config import load_config, get_log_level, get_offset_decimals
from .errors import TuningError
from .pitch import FIELD_ORDER, FIELD_TO_INDEX, parse_index
from .state import TuningSession
from .temperaments import TEMPERAMENTS
from .util.cents import format_cents

def _build_session(args, cfg) -> TuningSession:
    session = TuningSession()
    if args.doc:
        doc = persist.load_document(pathlib.Path(args.doc).expanduser().resolve())
        session.load_document(doc)
        return session

    session.select_temperament(args.temperament or cfg.get("default_temperament", "equal12"))
    if args.root is not None:
        session.select_root(parse_index(args.root))
    if args.pure is not None:
        session.select_pure_tone(parse_index(args.pure))
    if args.tweak:
        session.edit_tweak(args.tweak)
    return session

def _print_table(session: TuningSession, decimals: int):
    st = session.state
    print(f"[edotuner] {st.temperament.label or st.temperament.name}  "
          f"root={st.root} pure={st.pure_tone} tweak={format_cents(st.tweak, decimals)}")
    for name, idx in zip(FIELD_ORDER, FIELD_TO_INDEX):
        print(f"  {name:<3} {format_cents(st.final_offsets[idx], decimals):>8}")

def main(argv=None):
    p = argparse.ArgumentParser(description="EDO retuning table (12/15/17/19-EDO)")
    p.add_argument("--temperament", choices=sorted(TEMPERAMENTS), default=None,
                   help="Temperament (default from config)")
    p.add_argument("--root", default=None, help="Root as index 0..20 or spelling (C, F#, Bb…)")
    p.add_argument("--pure", default=None, help="Pure tone as index 0..20 or spelling")
    p.add_argument("--tweak", type=float, default=0.0, help="Global tweak in cents")
    p.add_argument("--doc", default=None, help="Load a saved tuning document (JSON) instead")
    p.add_argument("--save", default=None, help="Write the resulting tuning document (JSON)")
    p.add_argument("--json", action="store_true", help="Print the document instead of the table")
    p.add_argument("--config", dest="config", default=None, help="YAML config (defaults applied if omitted)")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = p.parse_args(argv)

    cfg = load_config(args.config)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else get_log_level(cfg),
        format="%(levelname)s %(name)s: %(message)s",
    )
    decimals = get_offset_decimals(cfg)

    try:
        session = _build_session(args, cfg)
    except (TuningError, KeyError) as e:
        print(f"[edotuner] ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(persist.format_document(session.to_document()))
    else:
        _print_table(session, decimals)

    if args.save:
        out_path = pathlib.Path(args.save).expanduser().resolve()
        try:
            persist.save_document(out_path, session.to_document())
        except OSError as e:
            print(f"[edotuner] ERROR: {e}", file=sys.stderr)
            sys.exit(1)
        session.mark_saved()
        print(f"[edotuner] saved -> {out_path}")

if __name__ == "__main__":
    main()
