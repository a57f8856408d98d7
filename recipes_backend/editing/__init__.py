"""
Recipe editing: drafts, manual edits, accepted substitutions, edit/fork saves.
"""
