"""
Application Layer

Orchestrates domain objects and infrastructure adapters to fulfil playback use cases.

Structure:
- services/: The playback controller, listening monitor, play reporter and stats service
- interfaces/: Port interfaces for infrastructure adapters
"""
