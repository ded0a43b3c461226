"""Phone-call orchestration: transcript, call session state machine and tool handlers."""
