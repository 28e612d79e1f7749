"""Shared HTML shell: <head>, header, CSS, and common JavaScript."""

from __future__ import annotations

import json


def head_html() -> str:
    """Return everything inside <head>: meta, Tailwind config, and CSS."""
    return """\
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>ONAIR</title>
    <script src="https://cdn.tailwindcss.com"></script>
    <script>
      tailwind.config = {
        darkMode: 'class',
        theme: {
          extend: {
            fontFamily: {
              sans: ['system-ui', '-apple-system', 'sans-serif'],
              mono: ['ui-monospace', 'monospace'],
            },
          }
        }
      }
    </script>
    <style>
      html { -webkit-font-smoothing: antialiased; -moz-osx-font-smoothing: grayscale; }

      ::-webkit-scrollbar { width: 5px; height: 5px; }
      ::-webkit-scrollbar-track { background: transparent; }
      ::-webkit-scrollbar-thumb { background: #334155; border-radius: 3px; }

      /* Sortable headers */
      th[data-sort] { cursor: pointer; user-select: none; }
      th[data-sort]:hover { color: #e2e8f0; }
      th[data-sort] .sort-arrow { opacity: 0.35; }
      th[data-sort].sorted .sort-arrow { opacity: 1; }

      /* Toast */
      @keyframes toastIn { from { opacity: 0; transform: translateY(6px) scale(0.97); } to { opacity: 1; transform: translateY(0) scale(1); } }
      .toast-enter { animation: toastIn 200ms ease; }
    </style>"""


def header_html() -> str:
    """Return the header bar with title, connection badge, and refresh button."""
    return """\
      <!-- Header -->
      <header class="flex items-center justify-between pb-3.5 mb-4 border-b border-slate-700">
        <div>
          <h1 class="text-[15px] font-bold tracking-wide text-slate-100">ONAIR</h1>
          <p class="text-[11px] text-slate-400 leading-tight">Live station telemetry</p>
        </div>
        <div class="flex items-center gap-3">
          <div class="flex items-center gap-2 text-[12px] text-slate-300">
            <span id="connection-dot" class="h-2 w-2 rounded-full bg-slate-400"></span>
            <span id="connection-text">offline</span>
          </div>
          <button id="refresh-btn" class="px-3 py-1.5 rounded-md text-[12px] bg-slate-800 border border-slate-700 hover:bg-slate-700">Refresh</button>
        </div>
      </header>"""


def config_js(config: dict[str, object]) -> str:
    """Return the server-side settings the dashboard script reads at startup."""
    return f"      const ONAIR_CONFIG = {json.dumps(config, sort_keys=True)};"


def shared_js() -> str:
    """Return shared JS: byId, escaping, time formatting, toast, fetchJSON."""
    return """\
      function byId(id) { return document.getElementById(id); }

      function esc(value) {
        const d = document.createElement('span');
        d.textContent = value == null ? '' : String(value);
        return d.innerHTML;
      }

      function fmtTime(s) {
        if (!s) return '';
        const d = new Date(s);
        if (Number.isNaN(d.getTime())) return String(s);
        return d.toLocaleString();
      }

      function showToast(message, type) {
        if (!message) return;
        const container = byId("toast-container");
        const el = document.createElement("div");
        const colorText = type === "error" ? "text-red-400" : type === "success" ? "text-green-400" : "text-slate-300";
        el.className = `bg-slate-800 border border-slate-700 rounded-lg px-3.5 py-2 text-[13px] ${colorText} shadow-lg pointer-events-auto max-w-[340px] toast-enter`;
        el.textContent = message;
        container.appendChild(el);
        setTimeout(() => el.remove(), 2800);
      }

      async function fetchJSON(path, params) {
        const qs = new URLSearchParams(params || {}).toString();
        const url = qs ? `${path}?${qs}` : path;
        const response = await fetch(url, { cache: "no-store" });
        if (!response.ok) {
          const text = await response.text().catch(() => "");
          throw new Error(`HTTP ${response.status} ${response.statusText} - ${text}`);
        }
        const contentType = response.headers.get("content-type") || "";
        if (!contentType.includes("application/json")) throw new Error(`Expected JSON from ${path}`);
        return response.json();
      }"""
