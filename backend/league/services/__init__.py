"""
Services Layer

Ranking and draw logic:
- Engine modules (results_aggregator, ranking_engine, pool_allocator,
  match_scheduler) are pure functions over in-memory values
- result_store / ranking_service / draw_service bridge the engine and the
  database session
- Nothing here depends on HTTP request/response objects
"""
