"""
Core business logic modules for AgentFit

Contains:
- Completion Client: HTTP access to the chat completions endpoint
- Response Parser: JSON extraction, repair and schema validation
- Prompt Executor: template rendering with bounded retries
- Result Cache: content-addressed, TTL-bound storage
- Agent Runner and Parallel Dispatcher: roster fan-out with fallbacks
- Aggregators: weighted-score validation and result combination
- Match Engine: scoring, tailoring and editing entry points
"""
