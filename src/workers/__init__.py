"""Worker processes for the governance core.

Workers:
- TransitionSweepWorker: external timer calling run_sweep on an interval
"""
