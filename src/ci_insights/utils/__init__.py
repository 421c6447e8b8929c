"""
This package provides the building blocks of the CI insights pipeline.

The modules within this package handle specific concerns such as:
- `constants`: Shared constant values (defaults, placeholders, formats).
- `exceptions`: The error taxonomy raised by every stage.
- `storage`: Local-disk and in-memory file access.
- `models`: Metadata records, trend statistics and analysis results.
- `metadata_utils`: Enumerating and loading run metadata.
- `stats_utils`: Trend window filtering and descriptive statistics.
- `prompt_utils`: Placeholder substitution for the prompt templates.
- `llm_utils`: The LLM client used to generate analyses.
- `report_utils`: Writing the Markdown and JSON artifacts.
"""
