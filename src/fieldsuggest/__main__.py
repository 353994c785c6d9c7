from __future__ import annotations
import argparse, json, logging, sys
from . import AutoCompleteEngine, EngineConfig, FieldType, make_source
from . import config as CFG


def _parse_context(pairs: list[str]) -> dict[str, str]:
    ctx: dict[str, str] = {}
    for p in pairs:
        key, sep, value = p.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"--context expects key=value, got {p!r}")
        ctx[key.strip()] = value.strip()
    return ctx


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Form-field suggestions from historical receipts/quotations")
    p.add_argument("--data", default=CFG.DEFAULT_DSN, help='History DSN: "memory://" or "json:///path"')
    p.add_argument("--field", choices=[ft.value for ft in FieldType], default=FieldType.CLIENT_NAME.value)
    p.add_argument("--q", default=None, help="Single query to run once")
    p.add_argument("--context", nargs="*", default=[], metavar="KEY=VALUE",
                   help="Form context, e.g. pieceType=anillo")
    p.add_argument("-k", type=int, default=CFG.MAX_SUGGESTIONS, help="Max suggestions")
    p.add_argument("--repl", action="store_true", help="Interactive loop; ':field NAME' switches field")
    p.add_argument("--stats", action="store_true", help="Print index statistics")
    p.add_argument("--json", action="store_true", help="Emit JSON rows")
    p.add_argument("--verbose", action="store_true")
    args = p.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO)
    try:
        context = _parse_context(args.context)
    except argparse.ArgumentTypeError as exc:
        p.error(str(exc))

    eng = AutoCompleteEngine(make_source(args.data), EngineConfig(max_suggestions=max(1, args.k)))
    try:
        if not eng.initialize():
            print("error: could not build indexes (see log)", file=sys.stderr)
            return 1

        field = args.field

        def run_query(q: str) -> None:
            rows = eng.get_suggestions(field, q, context)
            if args.json:
                print(json.dumps([r.to_dict() for r in rows], ensure_ascii=False, indent=2))
                return
            if not rows:
                print("(no suggestions)"); return
            print("#  Score  Freq  Value")
            for i, r in enumerate(rows, 1):
                print(f"{i:<2} {r.score:<6} {r.frequency:<5} {r.value}")

        if args.stats:
            print(json.dumps(eng.get_stats(), ensure_ascii=False, indent=2))

        if args.q:
            run_query(args.q)

        if args.repl:
            print(f"Type a query for {field} (empty line to exit).")
            while True:
                try:
                    q = input("> ").strip()
                except (EOFError, KeyboardInterrupt):
                    break
                if not q:
                    break
                if q.startswith(":field "):
                    name = q.split(None, 1)[1]
                    if name in {ft.value for ft in FieldType}:
                        field = name; print(f"(field: {field})")
                    else:
                        print(f"(unknown field {name!r})")
                    continue
                run_query(q)
        return 0
    finally:
        eng.shutdown()


if __name__ == "__main__":
    raise SystemExit(main())
