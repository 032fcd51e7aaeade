"""
Scoring engine: converts a user preference vector into a ranked,
explained broker shortlist.

Modules
-------
rules      : MatchReason / RuleResult + one pure scoring function per
             preference dimension — no I/O.
aggregator : BrokerScore + score_broker() + rank_brokers() + top_matches()
             + recommend().
debounce   : Debouncer — idle/pending state machine over an asyncio timer.
"""
