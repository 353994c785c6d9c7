from __future__ import annotations
import argparse
import logging
from flask import Flask, request, jsonify, Response
from fieldsuggest import AutoCompleteEngine, EngineConfig, FieldType, make_source
from fieldsuggest import config as CFG

app = Flask(__name__)
_engine: AutoCompleteEngine | None = None

# query-string keys forwarded to the ranking context
_CONTEXT_KEYS = ("pieceType", "material", "clientName")


def _get_engine() -> AutoCompleteEngine:
    global _engine
    if _engine is None:
        _engine = AutoCompleteEngine(make_source(CFG.DEFAULT_DSN))
    return _engine


# ---------- API ----------
@app.get("/api/suggest")
def api_suggest():
    field = request.args.get("field", "", type=str)
    q = request.args.get("q", "", type=str)
    k = request.args.get("k", None, type=int)
    if not q or not field:
        return jsonify([])
    ctx = {key: request.args[key] for key in _CONTEXT_KEYS if request.args.get(key)}
    rows = _get_engine().get_suggestions(field, q, ctx)
    if k is not None and k > 0:
        rows = rows[:k]
    return jsonify([r.to_dict() for r in rows])


@app.post("/api/learn")
def api_learn():
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return jsonify({"ok": False, "error": "expected a JSON object"}), 400
    eng = _get_engine()
    if "page" in body:
        values = body.get("values")
        if not isinstance(values, dict):
            return jsonify({"ok": False, "error": "'values' must be an object"}), 400
        n = eng.learn_from_form(str(body["page"]), values)
        return jsonify({"ok": True, "learned": n})
    field, value = body.get("field"), body.get("value")
    if not isinstance(field, str) or not isinstance(value, str):
        return jsonify({"ok": False, "error": "'field' and 'value' are required strings"}), 400
    ctx = body.get("context") if isinstance(body.get("context"), dict) else None
    eng.learn_from_input(field, value, ctx)
    return jsonify({"ok": True})


@app.get("/api/stats")
def api_stats():
    return jsonify(_get_engine().get_stats())


@app.get("/health")
def health():
    eng = _get_engine()
    return jsonify({"ok": True, "state": eng.state.value})


# ---------- UI ----------
@app.get("/")
def home():
    options = "".join(f'<option value="{ft.value}">{ft.value}</option>' for ft in FieldType)
    html = r"""
<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8" />
<meta name="viewport" content="width=device-width,initial-scale=1" />
<title>Field autocomplete • Flask UI</title>
<style>
:root{ --bg:#0b0f14; --panel:#0f141b; --ink:#cfd8e3; --muted:#8a94a6; --accent:#6ee7ff; --border:#1c2530; }
*{box-sizing:border-box}
body{ margin:0; background:var(--bg); color:var(--ink); font:16px/1.45 system-ui,-apple-system,Segoe UI,Roboto,Arial; }
.container{ max-width:860px; margin:24px auto; padding:0 16px; }
.card{ background:var(--panel); border:1px solid var(--border); border-radius:16px; padding:18px; }
h1{ font-size:20px; margin:0 0 8px 0; }
form{ display:flex; gap:12px; flex-wrap:wrap; margin:12px 0; }
input,select{ padding:10px 12px; border-radius:10px; border:1px solid var(--border); background:#0b1117; color:var(--ink); }
input#q{ flex:1; min-width:220px; }
.row{ display:grid; grid-template-columns:3rem 4rem 4rem 1fr; gap:10px; padding:10px 12px; border-top:1px solid var(--border); }
.small{ color:var(--muted); font-variant-numeric:tabular-nums }
.empty{ padding:24px; text-align:center; color:var(--muted); }
</style>
</head>
<body>
  <div class="container">
    <div class="card">
      <h1>Field autocomplete</h1>
      <form id="f" onsubmit="return false">
        <select id="field">__OPTIONS__</select>
        <input id="q" type="text" placeholder="Type at least two letters…" autocomplete="off" autofocus />
        <input id="piece" type="text" placeholder="pieceType (context)" autocomplete="off" />
      </form>
      <div id="out" class="empty">Start typing to see suggestions.</div>
    </div>
  </div>
<script>
const $ = (s) => document.querySelector(s);
const q = $("#q"), field = $("#field"), piece = $("#piece"), out = $("#out");
let t;
function esc(s){ return String(s).replace(/[&<>"]/g, c => ({"&":"&amp;","<":"&lt;",">":"&gt;",'"':"&quot;"}[c])); }
async function search(){
  const params = new URLSearchParams({field: field.value, q: q.value});
  if(piece.value) params.set("pieceType", piece.value);
  const resp = await fetch(`/api/suggest?${params}`);
  const data = resp.ok ? await resp.json() : [];
  if(!data.length){ out.className = "empty"; out.innerHTML = "No suggestions."; return; }
  out.className = "";
  out.innerHTML = data.map((r,i)=>`<div class="row"><div class="small">${i+1}</div>`+
    `<div class="small">${r.score}</div><div class="small">${r.frequency}</div><div>${esc(r.value)}</div></div>`).join("");
}
function debounced(){ clearTimeout(t); t = setTimeout(search, 160); }
[q, field, piece].forEach(el => el.addEventListener("input", debounced));
</script>
</body>
</html>
""".replace("__OPTIONS__", options)
    return Response(html, mimetype="text/html")


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Run the Flask suggestion API on top of AutoCompleteEngine")
    ap.add_argument("--data", default=CFG.DEFAULT_DSN, help='History DSN: "memory://" or "json:///path"')
    ap.add_argument("--max-suggestions", type=int, default=CFG.MAX_SUGGESTIONS)
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=8000)
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO)

    global _engine
    _engine = AutoCompleteEngine(make_source(args.data), EngineConfig(max_suggestions=args.max_suggestions))
    _engine.initialize()

    try:
        app.run(host=args.host, port=args.port, debug=args.verbose)
    finally:
        _engine.shutdown()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
