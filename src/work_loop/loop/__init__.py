"""Iteration controller and its data contracts.

One run is a bounded sequence of passes: queue check, task check, task
execution and an optional commit. The controller only sequences
collaborators and classifies the outcome; process invocation lives in
``work_loop.backend``.
"""
