"""
Services Layer

Pure business logic for round plans that:
- Accept plan values (TournamentPlan, RoundSpec) or decoded payloads
- Return new plan values, validation results or display summaries
- Do NOT depend on HTTP request/response objects
- Do NOT mutate their inputs
"""
