"""
Recognition pipeline for the image gateway.

Contains:
- `settings` : `Settings` configuration object
- `errors`   : `PipelineError` hierarchy with HTTP status codes
- `jobs`     : job ID generation and input directory allocation
- `state`    : Typed `RecognizeState` definition
- `tools`    : LangChain tools for fetching, submitting and collecting
- `nodes`    : LangGraph node callables operating over `RecognizeState`
- `graph`    : `build_graph(settings)` returning the compiled pipeline
"""
