"""Application services for release-util.

Services implement the release pipeline, coordinating between the core
types (core/) and the external tools (platform/, git/).
"""
