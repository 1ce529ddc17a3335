"""
Services Layer

Pure business logic services that:
- Accept domain inputs (IDs, sessions, principals)
- Return domain outputs (models, aggregates, tagged outcomes)
- Do NOT depend on HTTP request/response objects
- Only write derived tutorial state through RatingAggregator
"""
