"""
wmsproxy Test Suite

Structure:
- unit/: component tests (projection math, WMS client, cache, compositor,
  resolver, HTTP surface); upstream is always mocked
- integration/: live NOAA OpenGeo WMS checks (run with WMSPROXY_LIVE=1)
"""
