"""Release orchestration engine.

- context: the per-run data record and plugin input snapshot
- plugins: extension point registry and execution modes
- branches: release branch eligibility
- pipeline: the ordered release phases
- report: failure reporting
- service: one complete run (pipeline + reporting + output redaction)
"""

from __future__ import annotations
