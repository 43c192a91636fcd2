"""
Game services.

Pure game mechanics (scoring, daily selection, room rules, URL rewriting)
live here so HTTP handlers only parse requests and serialize results.
"""
