"""SafeAlarm API: trip escalation, SOS dispatch and acknowledgment."""
