"""Dashboard section: now-on-air card, events table, spot statistics, and their JS."""

from __future__ import annotations

from onair.core.models import EVENT_TYPES


def _type_options() -> str:
    return "".join(f'<option value="{value}">{value}</option>' for value in EVENT_TYPES)


def dashboard_section_html() -> str:
    """Return the dashboard markup."""
    return f"""\
      <!-- Now on air -->
      <section class="grid grid-cols-1 lg:grid-cols-3 gap-4 mb-4">
        <div class="bg-slate-900 border border-slate-700 rounded-lg p-4">
          <div class="flex items-center justify-between mb-2">
            <h2 class="text-[13px] font-semibold text-slate-300">Now on air</h2>
            <span class="text-[11px] text-slate-500">updated <span id="noa-updated">—</span></span>
          </div>
          <div id="noa-card"><div class="text-sm text-slate-400">No data</div></div>
          <div class="mt-3 h-1 w-full bg-slate-800 rounded"><div id="noa-progress" class="h-1 bg-emerald-500 rounded" style="width: 0%"></div></div>
        </div>

        <!-- Filters -->
        <div class="lg:col-span-2 bg-slate-900 border border-slate-700 rounded-lg p-4">
          <h2 class="text-[13px] font-semibold text-slate-300 mb-2">Recent events</h2>
          <div class="flex flex-wrap items-end gap-3">
            <label class="text-[12px] text-slate-400">Type
              <select id="filter-type" class="block mt-1 bg-slate-800 border border-slate-700 rounded px-2 py-1 text-slate-200">{_type_options()}</select>
            </label>
            <label class="text-[12px] text-slate-400">Limit
              <input id="filter-limit" type="number" min="1" max="500" value="50" class="block mt-1 w-24 bg-slate-800 border border-slate-700 rounded px-2 py-1 text-slate-200" />
            </label>
            <label class="text-[12px] text-slate-400">Order
              <select id="filter-order" class="block mt-1 bg-slate-800 border border-slate-700 rounded px-2 py-1 text-slate-200">
                <option value="desc">desc</option><option value="asc">asc</option>
              </select>
            </label>
            <button id="apply-filters" class="px-3 py-1.5 rounded-md text-[12px] bg-blue-600 hover:bg-blue-500 text-white">Apply</button>
            <button id="export-csv" class="px-3 py-1.5 rounded-md text-[12px] bg-slate-800 border border-slate-700 hover:bg-slate-700">Export CSV</button>
          </div>
        </div>
      </section>

      <!-- Events table -->
      <section class="bg-slate-900 border border-slate-700 rounded-lg p-4 mb-4">
        <div class="flex items-center justify-between mb-2 text-[12px] text-slate-400">
          <span id="events-total">0 events</span>
          <div class="flex items-center gap-2">
            <label>Page size
              <select id="page-size" class="ml-1 bg-slate-800 border border-slate-700 rounded px-1 py-0.5 text-slate-200">
                <option value="10">10</option><option value="25" selected>25</option><option value="50">50</option><option value="100">100</option>
              </select>
            </label>
            <button id="page-prev" class="px-2 py-0.5 rounded bg-slate-800 border border-slate-700">&lsaquo;</button>
            <span id="page-label">Page 1/1</span>
            <button id="page-next" class="px-2 py-0.5 rounded bg-slate-800 border border-slate-700">&rsaquo;</button>
          </div>
        </div>
        <table class="w-full text-left text-[13px]">
          <thead class="text-slate-400 border-b border-slate-700">
            <tr>
              <th class="px-2 py-2" data-sort="play_time">Time <span class="sort-arrow"></span></th>
              <th class="px-2 py-2" data-sort="event_type">Type <span class="sort-arrow"></span></th>
              <th class="px-2 py-2" data-sort="artist">Artist <span class="sort-arrow"></span></th>
              <th class="px-2 py-2" data-sort="title">Title <span class="sort-arrow"></span></th>
              <th class="px-2 py-2" data-sort="filename">Filename <span class="sort-arrow"></span></th>
            </tr>
          </thead>
          <tbody id="events-tbody"></tbody>
        </table>
        <div id="events-empty" class="hidden py-6 text-center text-sm text-slate-400">No events</div>
      </section>

      <!-- Spot statistics -->
      <section class="bg-slate-900 border border-slate-700 rounded-lg p-4">
        <div class="flex items-center justify-between mb-2 text-[12px] text-slate-400">
          <h2 class="text-[13px] font-semibold text-slate-300">Spot statistics</h2>
          <div class="flex items-center gap-2">
            <button id="spots-prev" class="px-2 py-0.5 rounded bg-slate-800 border border-slate-700">&lsaquo;</button>
            <span id="spots-page">Page 1</span>
            <button id="spots-next" class="px-2 py-0.5 rounded bg-slate-800 border border-slate-700">&rsaquo;</button>
            <button id="spots-load" class="px-2 py-0.5 rounded bg-slate-800 border border-slate-700">Load</button>
          </div>
        </div>
        <div id="spots-body" class="text-sm text-slate-400 overflow-x-auto">Not loaded</div>
      </section>"""


def dashboard_js() -> str:
    """Return the polling, store, and render logic for the dashboard."""
    return """\
      const SORT_KEYS = ['play_time', 'event_type', 'artist', 'title', 'filename'];
      const state = {
        filters: { type: 'SONG', limit: 50, order: 'desc' },
        events: [],
        nowOnAir: null,
        lastNowOnAirAt: null,
        sort: { key: 'play_time', dir: 'desc' },
        page: 1,
        pageSize: ONAIR_CONFIG.pageSize,
        connection: 'offline',
        spots: { page: 1, limit: 50, payload: null },
        seq: { dispatched: { noa: 0, events: 0, spots: 0 }, applied: { noa: 0, events: 0, spots: 0 } },
      };
      let noaTimer = null;
      let eventsTimer = null;

      /* ============ Store ============ */
      function nextSeq(field) { state.seq.dispatched[field] += 1; return state.seq.dispatched[field]; }
      function acceptSeq(field, seq) {
        if (seq <= state.seq.applied[field]) return false;
        state.seq.applied[field] = seq;
        return true;
      }
      function pageCount() { return Math.max(1, Math.ceil(state.events.length / state.pageSize)); }
      function clampPage(page) { return Math.max(1, Math.min(page, pageCount())); }

      function setConnection(status) {
        state.connection = status;
        byId('connection-text').textContent = status;
        byId('connection-dot').className = `h-2 w-2 rounded-full ${
          status === 'connected' ? 'bg-emerald-500' : status === 'reconnecting' ? 'bg-amber-400' : 'bg-slate-400'
        }`;
      }

      /* ============ Projection ============ */
      function parseTime(s) { const t = new Date(s || '').getTime(); return Number.isNaN(t) ? 0 : t; }

      function sortedEvents() {
        const { key, dir } = state.sort;
        const sign = dir === 'asc' ? 1 : -1;
        /* Array.prototype.sort is stable; ties return 0 and keep received order */
        return state.events.slice().sort((a, b) => {
          if (key === 'play_time') return sign * (parseTime(a.play_time) - parseTime(b.play_time));
          const av = String(a[key] ?? ''), bv = String(b[key] ?? '');
          return av < bv ? -sign : av > bv ? sign : 0;
        });
      }

      /* ============ Render ============ */
      function renderNowOnAir() {
        const item = state.nowOnAir;
        byId('noa-updated').textContent = state.lastNowOnAirAt ? fmtTime(state.lastNowOnAirAt) : '—';
        /* The upstream API exposes no elapsed time, so progress stays at zero */
        byId('noa-progress').style.width = '0%';
        if (!item) {
          byId('noa-card').innerHTML = '<div class="text-sm text-slate-400">No data</div>';
          return;
        }
        byId('noa-card').innerHTML = `
          <div class="space-y-1">
            <div class="text-lg font-semibold text-slate-100">${esc(item.title || '(untitled)')}</div>
            <div class="text-slate-300">${esc(item.artist || '')}</div>
            <div class="text-xs text-slate-400">${esc(item.event_type || '')} • ${esc(fmtTime(item.play_time))}</div>
          </div>`;
      }

      function renderEvents() {
        const total = state.events.length;
        byId('events-total').textContent = `${total} events`;
        document.querySelectorAll('th[data-sort]').forEach(th => {
          const active = th.dataset.sort === state.sort.key;
          th.classList.toggle('sorted', active);
          th.querySelector('.sort-arrow').textContent = active ? (state.sort.dir === 'asc' ? '▲' : '▼') : '';
        });
        if (total === 0) {
          byId('events-tbody').innerHTML = '';
          byId('events-empty').classList.remove('hidden');
          byId('page-label').textContent = 'Page 1/1';
          return;
        }
        byId('events-empty').classList.add('hidden');
        state.page = clampPage(state.page);
        const start = state.pageSize * (state.page - 1);
        const rows = sortedEvents().slice(start, Math.min(start + state.pageSize, total));
        byId('events-tbody').innerHTML = rows.map(e => `
          <tr class="hover:bg-slate-700/30 border-b border-slate-800">
            <td class="px-2 py-2 whitespace-nowrap">${esc(fmtTime(e.play_time))}</td>
            <td class="px-2 py-2">${esc(e.event_type ?? '')}</td>
            <td class="px-2 py-2">${esc(e.artist ?? '')}</td>
            <td class="px-2 py-2">${esc(e.title ?? '')}</td>
            <td class="px-2 py-2 font-mono text-[12px]">${esc(e.filename ?? '')}</td>
          </tr>`).join('');
        byId('page-label').textContent = `Page ${state.page}/${pageCount()}`;
      }

      function renderSpots() {
        byId('spots-page').textContent = `Page ${state.spots.page}`;
        const payload = state.spots.payload;
        const rows = Array.isArray(payload) ? payload : (payload && Array.isArray(payload.items) ? payload.items : null);
        if (!rows) {
          byId('spots-body').innerHTML = payload ? `<pre class="text-[12px]">${esc(JSON.stringify(payload, null, 2))}</pre>` : 'No data';
          return;
        }
        if (!rows.length) { byId('spots-body').textContent = 'No spots on this page'; return; }
        const cols = [];
        rows.forEach(r => Object.keys(r || {}).forEach(k => { if (!cols.includes(k)) cols.push(k); }));
        byId('spots-body').innerHTML = `<table class="w-full text-left text-[13px]"><thead class="text-slate-400"><tr>${
          cols.map(c => `<th class="px-2 py-1">${esc(c)}</th>`).join('')}</tr></thead><tbody>${
          rows.map(r => `<tr class="border-b border-slate-800">${cols.map(c => `<td class="px-2 py-1">${esc(r[c] ?? '')}</td>`).join('')}</tr>`).join('')
        }</tbody></table>`;
      }

      /* ============ Data loaders ============ */
      async function fetchNowOnAir() {
        const seq = nextSeq('noa');
        try {
          const data = await fetchJSON('/api/now-on-air');
          if (acceptSeq('noa', seq)) {
            state.nowOnAir = data || null;
            state.lastNowOnAirAt = new Date().toISOString();
            renderNowOnAir();
          }
          setConnection('connected');
        } catch (err) {
          console.error('now-on-air error', err);
          setConnection('reconnecting');
        }
      }

      async function fetchEventsByType() {
        const { type, limit, order } = state.filters;
        const seq = nextSeq('events');
        try {
          const data = await fetchJSON('/api/events/by-type', { type, limit: String(limit), order });
          if (acceptSeq('events', seq)) {
            state.events = Array.isArray(data) ? data : (data && Array.isArray(data.items) ? data.items : []);
            renderEvents();
          }
          setConnection('connected');
        } catch (err) {
          console.error('events error', err);
          setConnection('reconnecting');
        }
      }

      async function fetchSpots() {
        const { page, limit } = state.spots;
        const seq = nextSeq('spots');
        try {
          const data = await fetchJSON('/api/stats/spots/all', { page: String(page), limit: String(limit) });
          if (acceptSeq('spots', seq)) { state.spots.payload = data; renderSpots(); }
          setConnection('connected');
        } catch (err) {
          console.error('spots error', err);
          setConnection('reconnecting');
        }
      }

      /* ============ Polling ============ */
      function startPolling() {
        clearInterval(noaTimer);
        clearInterval(eventsTimer);
        fetchNowOnAir();
        fetchEventsByType();
        noaTimer = setInterval(fetchNowOnAir, ONAIR_CONFIG.nowPlayingIntervalMs);
        eventsTimer = setInterval(fetchEventsByType, ONAIR_CONFIG.eventsIntervalMs);
      }

      /* ============ Handlers ============ */
      function parseLimit(raw) {
        const n = Number(raw);
        if (n === Infinity) return 500;
        const whole = Math.trunc(n);
        if (!Number.isFinite(whole) || whole < 1) return 50;
        return Math.min(500, whole);
      }

      function applyFilters() {
        state.filters = {
          type: byId('filter-type').value || state.filters.type,
          limit: parseLimit(byId('filter-limit').value),
          order: byId('filter-order').value === 'asc' ? 'asc' : 'desc',
        };
        byId('filter-limit').value = String(state.filters.limit);
        state.page = 1;
        renderEvents();
        fetchEventsByType();
      }

      function sortBy(key) {
        if (!SORT_KEYS.includes(key)) return;
        if (state.sort.key === key) state.sort = { key, dir: state.sort.dir === 'asc' ? 'desc' : 'asc' };
        else state.sort = { key, dir: 'asc' };
        state.page = 1;
        renderEvents();
      }

      function shiftPage(delta) { state.page = clampPage(clampPage(state.page) + delta); renderEvents(); }

      function setPageSize(size) {
        state.pageSize = Math.max(1, Number(size) || ONAIR_CONFIG.pageSize);
        state.page = 1;
        renderEvents();
      }

      function shiftSpotsPage(delta) { state.spots.page = Math.max(1, state.spots.page + delta); renderSpots(); fetchSpots(); }

      function csvField(v) {
        const s = String(v);
        return /[",\\n\\r]/.test(s) ? '"' + s.replace(/"/g, '""') + '"' : s;
      }

      function exportCsv() {
        const rows = [
          ['time', 'type', 'artist', 'title', 'filename'],
          ...state.events.map(e => [e.play_time || '', e.event_type || '', e.artist || '', e.title || '', e.filename || '']),
        ];
        const csv = rows.map(r => r.map(csvField).join(',')).join('\\n');
        const blob = new Blob([csv], { type: 'text/csv;charset=utf-8;' });
        const url = URL.createObjectURL(blob);
        const a = document.createElement('a');
        a.href = url;
        a.download = `events_${state.filters.type.toLowerCase()}_${Date.now()}.csv`;
        document.body.appendChild(a);
        a.click();
        document.body.removeChild(a);
        URL.revokeObjectURL(url);
        showToast(`Exported ${state.events.length} events`, 'success');
      }

      function bindEvents() {
        byId('apply-filters').addEventListener('click', applyFilters);
        byId('export-csv').addEventListener('click', exportCsv);
        byId('refresh-btn').addEventListener('click', () => { fetchNowOnAir(); fetchEventsByType(); });
        byId('page-prev').addEventListener('click', () => shiftPage(-1));
        byId('page-next').addEventListener('click', () => shiftPage(1));
        byId('page-size').addEventListener('change', e => setPageSize(e.target.value));
        document.querySelectorAll('th[data-sort]').forEach(th => th.addEventListener('click', () => sortBy(th.dataset.sort)));
        byId('spots-prev').addEventListener('click', () => shiftSpotsPage(-1));
        byId('spots-next').addEventListener('click', () => shiftSpotsPage(1));
        byId('spots-load').addEventListener('click', () => fetchSpots());
      }

      function init() {
        bindEvents();
        byId('page-size').value = String(state.pageSize);
        setConnection('offline');
        renderNowOnAir();
        renderEvents();
        startPolling();
      }
      init();"""
