"""
This package contains the LLM-based test-run analyzer.

Its purpose is to read the `metadata.json` records that client projects push
into the reports tree, summarise them (a single run, or a trend over a time
window), ask a large language model for a narrative analysis and write the
result back into the analysis tree.

Usage:
------
    $ python -m src.ci_insights.main --project my-app --type single --timestamp 20250101-120000
    $ python -m src.ci_insights.main --project my-app --type trend --period 7
"""
