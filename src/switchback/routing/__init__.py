"""Routing — priority-ordered route table with regex placeholder matching.

Route patterns use ``<name>`` or ``<name:type>`` placeholders that compile
to regular expressions against the router's var vocabulary.
"""
