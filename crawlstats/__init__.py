"""In-process crawl statistics.

Counts request outcomes from any number of crawler threads, turns them into
a periodic report, and pushes the report to a configured sink.

Key modules:
    models      -- RequestOutcome, StatsIdentity, Report and its parts
    metrics     -- CounterStore and the thread-safe StatsAggregator
    probe       -- TCP connect latency probing for target hosts
    resources   -- CPU / memory / disk sampling via psutil
    reporter    -- ReportingScheduler, the cancellable reporting loop
    context     -- StatsContext wiring the aggregator, callbacks and sink
    registry    -- init_stats / update_stats / send_stats module-level API
    push        -- PushSink, HttpPushSink and JsonlPushSink
    cleanup     -- clean_old_files retention sweep
    config      -- StatsConfig, RetentionConfig and duration parsing
    tracking    -- TrackedRequest helper that records its own outcome
    errors      -- exception hierarchy
"""
