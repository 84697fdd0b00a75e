"""GEO readiness analysis.

Scores a single fetched HTML page for how well AI answer engines can quote it:
  1. Page context (parsed DOM, visible text, JSON-LD scan)
  2. HTML checks (schema, content structure, E-E-A-T, meta, snippet style)
  3. Metrics checks (optional, from the search-metrics provider)
  4. Aggregation (totals, summary buckets, category scores, grade)

Input:  page HTML + URL (+ MetricsResult)
Output: Analysis (app.schemas.geo_audit)
"""
