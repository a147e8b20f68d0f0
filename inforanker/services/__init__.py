"""Services layer for InfoRanker.

Services implement business logic and orchestrate data operations.
Organized by feature:
- collector: Source adapters, deduplication and repositories
- scoring: Relevance filter, quality evaluation and final scores
- collection: Job orchestration, queueing and progress reporting
"""
