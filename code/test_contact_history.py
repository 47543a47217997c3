#!/usr/bin/env python3
# test_contact_history.py
"""
Tests de l'historique des contacts et du compteur de betweenness.
"""
import logging
import sys
import os

import pytest

# Ajouter le répertoire du code au chemin d'importation
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from models.node import Node
from protocols.contact_history import BetweennessCounter, ContactHistory, Duration


def test_contact_up_down_records_duration():
    history = ContactHistory()
    b = Node(1)
    history.on_contact_up(b, 10.0)
    assert history.is_in_contact(b)

    duration = history.on_contact_down(b, 25.0)

    assert duration == Duration(10.0, 25.0)
    assert duration.length == 15.0
    assert history.durations(b) == [Duration(10.0, 25.0)]
    assert not history.is_in_contact(b)


def test_zero_length_contact_is_dropped():
    """Une ouverture et une fermeture au même instant ne laissent pas de trace."""
    history = ContactHistory()
    b = Node(1)
    history.on_contact_up(b, 5.0)
    assert history.on_contact_down(b, 5.0) is None
    assert history.durations(b) == []
    assert not history.is_in_contact(b)


def test_contact_down_without_up_is_noop():
    """Une fermeture sans ouverture ne plante pas et ne modifie rien."""
    history = ContactHistory()
    b, c = Node(1), Node(2)
    history.on_contact_up(c, 0.0)
    history.on_contact_down(c, 3.0)
    before = history.as_mapping()

    assert history.on_contact_down(b, 10.0) is None
    assert history.as_mapping() == before
    assert len(history) == 1


def test_contact_down_without_up_logs_warning(caplog):
    history = ContactHistory()
    with caplog.at_level(logging.WARNING, logger='protocols.contact_history'):
        history.on_contact_down(Node(1), 10.0)
    assert "sans début enregistré" in caplog.text


def test_contact_without_clock_is_closed_silently(caplog):
    """Un contact ouvert sans horloge (instant None) se ferme sans avertissement."""
    history = ContactHistory()
    b = Node(1)
    history.on_contact_up(b, None)
    assert history.is_in_contact(b)

    with caplog.at_level(logging.WARNING, logger='protocols.contact_history'):
        assert history.on_contact_down(b, None) is None

    assert caplog.text == ""
    assert not history.is_in_contact(b)
    assert history.durations(b) == []


def test_contact_starting_at_zero_is_recorded():
    history = ContactHistory()
    b = Node(1)
    history.on_contact_up(b, 0.0)
    assert history.on_contact_down(b, 4.0) == Duration(0.0, 4.0)


def test_history_is_append_only():
    history = ContactHistory()
    b = Node(1)
    for start, end in [(0, 2), (5, 9), (12, 13)]:
        history.on_contact_up(b, start)
        history.on_contact_down(b, end)
    assert [d.start for d in history.durations(b)] == [0, 5, 12]
    assert history.total_contact_time(b) == 7
    assert history.total_contact_time() == 7
    assert history.neighbors() == [b]


def test_normalized_betweenness_empty():
    counter = BetweennessCounter()
    assert counter.normalized(Node(0)) == 0.0


def test_normalized_betweenness_range():
    """La valeur normalisée est dans [0, 1] et vaut 1 pour le maximum."""
    a, b, c = Node(0), Node(1), Node(2)
    counter = BetweennessCounter()
    for _ in range(4):
        counter.increment(a)
    counter.increment(b)

    assert counter.normalized(a) == 1.0
    assert counter.normalized(b) == pytest.approx(0.25)
    assert counter.normalized(c) == 0.0
    for node in (a, b, c):
        assert 0.0 <= counter.normalized(node) <= 1.0


def test_normalized_betweenness_all_zero():
    a, b = Node(0), Node(1)
    counter = BetweennessCounter()
    counter.observe(a, 0.0)
    assert counter.normalized(a) == 0.0
    assert counter.normalized(b) == 0.0


def test_observe_never_decreases():
    a = Node(0)
    counter = BetweennessCounter()
    counter.observe(a, 3.0)
    counter.observe(a, 1.0)
    assert counter.get(a) == 3.0


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
