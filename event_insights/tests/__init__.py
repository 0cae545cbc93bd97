'''
Event Insights Backend Test Suite

Test Modules:
-------------
- test_statistics.py: mean / sample std / percentile rank / linear fit
- test_anomaly_detection.py: z-score cut-offs, confidence, flat histories
- test_trend_analysis.py: normalized rate, rate/R² classification, forecast
- test_benchmarking.py: inclusive percentile, deciles/quartiles, rating
- test_insight_synthesizer.py: templates, impact polarity, fallbacks
- test_insight_prioritizer.py: floor, dedup, stable sort, truncation, summary
- test_insights_engine.py: reference scenario, idempotence, report status
- test_record_source.py: windows, row mapping, fetchers on a mocked pool
- test_api.py: endpoints invoked directly with the record source patched

Running Tests:
--------------
    pip install -e ".[test]"
    pytest -v

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

__all__ = []
