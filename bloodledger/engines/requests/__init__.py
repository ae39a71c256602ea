"""
Request Workflow Engine
=======================
Per-(patient, blood type) request queues and per-patient
response histories. Only the queue tail can be answered.
"""
