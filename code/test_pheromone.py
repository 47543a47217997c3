#!/usr/bin/env python3
# test_pheromone.py
"""
Tests de la table de phéromones : lecture, étiquetage des messages et règle
de renforcement avec évaporation locale.
"""
import sys
import os

import pytest

# Ajouter le répertoire du code au chemin d'importation
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from models.connection import Connection
from models.message import DESTINATION_REF, PATH_LENGTH, Message
from models.node import Node
from protocols.pheromone import PheromoneTable


def link(a, b):
    """Crée un contact actif entre deux nœuds."""
    con = Connection(a, b)
    a.add_connection(con)
    b.add_connection(con)
    return con


def tagged_message(source, destination, path_length):
    m = Message(source, destination, 'M1', 100)
    m.set_property(DESTINATION_REF, destination)
    m.set_property(PATH_LENGTH, float(path_length))
    return m


@pytest.mark.parametrize("rate", [0.0, 0.1, 0.5, 0.9])
@pytest.mark.parametrize("path_length", [1, 2, 5])
@pytest.mark.parametrize("current", [0.0, 0.3, 2.0])
def test_reinforcement_rule(rate, path_length, current):
    """τ' = (1 - ρ) * (τ + 1/L) sur l'arête empruntée."""
    a, b, d = Node(0), Node(1), Node(2)
    link(a, b)
    table = PheromoneTable(rate)
    table.table[d] = {b: current}

    new_value = table.update_pheromone(a, b, tagged_message(a, d, path_length))

    expected = (1 - rate) * (current + 1.0 / path_length)
    assert new_value == pytest.approx(expected)
    assert table.get(d, b) == pytest.approx(expected)


def test_reinforcement_is_monotonic():
    """Le renforcement croît avec τ et avec 1/L."""
    table = PheromoneTable(0.1)
    assert table.reinforced_value(0.5, 2) > table.reinforced_value(0.2, 2)
    assert table.reinforced_value(0.5, 2) > table.reinforced_value(0.5, 4)


def test_only_reinforced_edge_changes():
    """Les arêtes non empruntées ne s'évaporent pas."""
    a, b, c, d = Node(0), Node(1), Node(2), Node(3)
    link(a, b)
    link(a, c)
    table = PheromoneTable(0.1)
    table.table[d] = {b: 1.0, c: 0.7}

    table.update_pheromone(a, b, tagged_message(a, d, 2))

    assert table.get(d, b) == pytest.approx(0.9 * 1.5)
    assert table.get(d, c) == 0.7


def test_get_pheromone_untagged_message():
    """Un message non étiqueté donne toujours 0.0."""
    a, b = Node(0), Node(1)
    table = PheromoneTable()
    table.table[b] = {a: 3.0}
    assert table.get_pheromone(a, Message(a, b, 'M1', 10)) == 0.0


def test_get_pheromone_defaults_to_zero():
    a, b, d = Node(0), Node(1), Node(2)
    table = PheromoneTable()
    assert table.get_pheromone(b, tagged_message(a, d, 2)) == 0.0
    table.create_entry(d)
    assert table.get_pheromone(b, tagged_message(a, d, 2)) == 0.0


def test_update_without_path_length_is_noop():
    a, b, d = Node(0), Node(1), Node(2)
    link(a, b)
    table = PheromoneTable()
    m = Message(a, d, 'M1', 10)
    m.set_property(DESTINATION_REF, d)

    assert table.update_pheromone(a, b, m) is None
    assert table.get(d, b) == 0.0


def test_update_from_unconnected_neighbor_is_noop():
    a, b, c, d = Node(0), Node(1), Node(2), Node(3)
    link(a, b)
    table = PheromoneTable()
    assert table.update_pheromone(a, c, tagged_message(a, d, 2)) is None
    assert table.entries(d) == {}


def test_tag_message_snapshots_hop_count():
    """L'étiquetage fige la longueur du chemin à l'arrivée."""
    a, b, c = Node(0), Node(1), Node(2)
    m = Message(a, c, 'M1', 10)
    m.add_node_to_path(b)
    m.add_node_to_path(c)
    table = PheromoneTable()

    table.tag_message(m)
    m.add_node_to_path(b)

    assert m.get_property(DESTINATION_REF) is c
    assert m.get_property(PATH_LENGTH) == 2.0
    assert c in table


def test_create_entry_is_idempotent():
    d, n = Node(0), Node(1)
    table = PheromoneTable()
    table.create_entry(d)
    table.table[d][n] = 0.4
    table.create_entry(d)
    assert table.entries(d) == {n: 0.4}
    assert len(table) == 1


@pytest.mark.parametrize("rate", [-0.1, 1.0, 1.5])
def test_invalid_evaporation_rate(rate):
    with pytest.raises(ValueError):
        PheromoneTable(rate)


def test_as_dataframe():
    d, n1, n2 = Node(0), Node(1), Node(2)
    table = PheromoneTable()
    table.table[d] = {n1: 0.5, n2: 0.25}
    df = table.as_dataframe()
    assert list(df.columns) == ['destination', 'neighbor', 'pheromone']
    assert len(df) == 2
    assert df['pheromone'].sum() == pytest.approx(0.75)


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
