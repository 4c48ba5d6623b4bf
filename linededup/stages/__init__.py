"""Pipeline stages: encoding detection, streaming decode, line dedup, output sinks.

Each stage exposes a small API; ``linededup.pipeline`` wires them together
for one file at a time.
"""
