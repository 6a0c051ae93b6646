"""Artifact resolution and transfer engine.

Leaf-first: ``keys`` (pure key resolution), ``freshness`` (change
detection), ``transfer`` (one object), ``tree`` (many objects),
``publisher`` (HEAD / latest), ``waiter`` (existence polling), and the
``client.Mhook`` facade that ties them to a configured store.
"""
