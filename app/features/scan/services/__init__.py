"""
Scan Services

Organized by responsibility:

1. store.py - Persistence boundary (ScanStore protocol + SqlAlchemyStore)

2. queue.py - ScanQueue: creates pending scans (scheduler and on-demand requests)

3. runner.py - AuditRunner: pending -> running -> completed | failed for one scan
   - recommendations.py: failing audits -> Recommendation rows
   - report_storage.py: raw engine report on disk
   - regression.py: performance drop alerts after a completed scan

4. processor.py - ScanQueueProcessor: drains pending scans, one batch per call

5. scheduler.py - DueWebsiteScheduler: enqueues websites whose next scan is due
   - frequency.py: next_scan_at arithmetic per ScanFrequency

6. orchestration/ - Wiring
   - builder.py: build_scan_services() assembles the above with real or injected collaborators

The timers that call processor and scheduler live in app.features.scan.workers.
"""
