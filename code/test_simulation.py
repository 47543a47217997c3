#!/usr/bin/env python3
# test_simulation.py
"""
Tests du monde simulé, du chargement des traces de contacts, du générateur
de messages, des statistiques et de la simulation complète en ligne de commande.
"""
import sys
import os

import pytest

# Ajouter le répertoire du code au chemin d'importation
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from data.loader import (ContactEvent, adjacency_to_contact_events, load_contact_trace,
                         random_adjacency, trace_to_dataframe)
from main import main
from models.node import Node
from protocols.cultural_aco import CulturalACORouter, CulturalACOSettings
from simulation.generator import MessageCreateEvent, MessageGenerator
from simulation.metrics import MessageStats
from simulation.visualize import plot_delivery_over_time, plot_pheromone_heatmap
from simulation.world import World


def make_world(num_nodes, contacts, messages, **kwargs):
    proto = CulturalACORouter(CulturalACOSettings(centrality_alg='DegreeCentrality'))
    stats = MessageStats()
    world = World.from_prototype(num_nodes, proto, contact_events=contacts,
                                 message_events=messages, listeners=[stats], **kwargs)
    return world, stats


#*************** Monde simulé ****************
def test_direct_delivery():
    world, stats = make_world(2, [ContactEvent(0, 0, 1, True)],
                              [MessageCreateEvent(0, 0, 1, 'M1', 100)], transfer_speed=250)
    world.run(3)
    assert stats.delivered['M1'][1] == 1
    assert stats.delivery_ratio() == 1.0
    assert 'M1' in world.get_node(1).router.delivered


def test_backward_ant_moves_are_not_counted_as_relays():
    """La livraison est un relais, le retour de la fourmi est compté à part."""
    world, stats = make_world(2, [ContactEvent(0, 0, 1, True)],
                              [MessageCreateEvent(0, 0, 1, 'M1', 100)], transfer_speed=250)
    world.run(4)
    assert 'M1' in stats.returned
    assert stats.relayed == 1
    assert stats.ant_moves == 1
    assert stats.overhead_ratio() == 0.0
    assert stats.summary()['ant_moves'] == 1


def test_delivered_request_creates_response():
    world, stats = make_world(2, [ContactEvent(0, 0, 1, True)],
                              [MessageCreateEvent(0, 0, 1, 'M1', 100, 300)], transfer_speed=250)
    world.run(8)
    source, destination = world.get_node(0), world.get_node(1)
    assert 'R_M1' in stats.created
    assert stats.created['R_M1'] == stats.delivered['M1'][0]
    assert stats.delivered['R_M1'][1] == 1
    assert 'R_M1' in source.router.delivered
    assert not destination.router.has_message('R_M1')


def test_one_way_message_has_no_response():
    world, stats = make_world(2, [ContactEvent(0, 0, 1, True)],
                              [MessageCreateEvent(0, 0, 1, 'M1', 100)], transfer_speed=250)
    world.run(8)
    assert list(stats.created) == ['M1']


def test_transfer_aborted_when_contact_goes_down():
    world, stats = make_world(2, [ContactEvent(0, 0, 1, True), ContactEvent(3, 0, 1, False)],
                              [MessageCreateEvent(0, 0, 1, 'M1', 1000)], transfer_speed=100)
    world.run(5)
    assert stats.started == 1
    assert stats.aborted == 1
    assert stats.delivered == {}
    assert world.get_node(1).router.incoming == {}
    assert not world.get_node(1).router.has_message('M1')
    assert world.connections == {}


def test_transfer_takes_size_over_speed_ticks():
    world, stats = make_world(2, [ContactEvent(0, 0, 1, True)],
                              [MessageCreateEvent(0, 0, 1, 'M1', 1000)], transfer_speed=250)
    world.run(4)
    assert stats.delivered == {}
    world.run(5)
    assert stats.delivered['M1'][0] == 4


def test_contact_events_update_both_histories():
    world, _ = make_world(3, [ContactEvent(0, 0, 1, True), ContactEvent(4, 0, 1, False)], [])
    world.run(6)
    a, b = world.get_node(0), world.get_node(1)
    assert [d.length for d in a.router.contact_history.durations(b)] == [4.0]
    assert [d.length for d in b.router.contact_history.durations(a)] == [4.0]


def test_disconnect_without_contact_is_ignored():
    world, _ = make_world(2, [ContactEvent(1, 0, 1, False)], [])
    world.run(3)
    assert world.get_node(0).router.contact_history.as_mapping() == {}


def test_from_prototype_creates_independent_routers():
    world, _ = make_world(3, [], [])
    routers = [node.router for node in world.nodes.values()]
    assert len({id(r) for r in routers}) == 3
    assert len({id(r.pheromone_table) for r in routers}) == 3
    assert all(r.world is world for r in routers)


def test_unknown_node_in_events():
    world, _ = make_world(2, [ContactEvent(0, 0, 7, True)], [])
    with pytest.raises(ValueError, match="inconnu"):
        world.run(1)


def test_node_without_router():
    with pytest.raises(ValueError):
        World([Node(0)])


#*************** Traces de contacts ****************
def test_load_contact_trace(tmp_path):
    path = tmp_path / "trace.csv"
    path.write_text("time,node_a,node_b,state\n5,0,1,down\n0,0,1,up\n2,1,2,UP\n")

    events, num_nodes = load_contact_trace(path)

    assert num_nodes == 3
    assert events == [ContactEvent(0.0, 0, 1, True), ContactEvent(2.0, 1, 2, True),
                      ContactEvent(5.0, 0, 1, False)]


def test_load_contact_trace_missing_columns(tmp_path):
    path = tmp_path / "trace.csv"
    path.write_text("time,node_a,state\n0,0,up\n")
    with pytest.raises(ValueError, match="node_b"):
        load_contact_trace(path)


def test_load_contact_trace_unknown_state(tmp_path):
    path = tmp_path / "trace.csv"
    path.write_text("time,node_a,node_b,state\n0,0,1,sideways\n")
    with pytest.raises(ValueError, match="sideways"):
        load_contact_trace(path)


def test_load_contact_trace_rejects_self_contact(tmp_path):
    """Un contact d'un nœud avec lui-même est refusé au chargement, pas pendant la simulation."""
    path = tmp_path / "trace.csv"
    path.write_text("time,node_a,node_b,state\n0,0,1,up\n1,2,2,up\n3,0,1,down\n")
    with pytest.raises(ValueError, match="lignes 3"):
        load_contact_trace(path)


def test_load_contact_trace_rejects_negative_ids(tmp_path):
    path = tmp_path / "trace.csv"
    path.write_text("time,node_a,node_b,state\n0,0,1,up\n1,-1,2,up\n2,3,-4,up\n")
    with pytest.raises(ValueError, match="lignes 3, 4"):
        load_contact_trace(path)


def test_trace_round_trip(tmp_path):
    events = [ContactEvent(0.0, 0, 1, True), ContactEvent(3.0, 0, 1, False)]
    path = tmp_path / "trace.csv"
    trace_to_dataframe(events).to_csv(path, index=False)
    assert load_contact_trace(path)[0] == events


def test_adjacency_to_contact_events():
    adjacency = {
        0: {0: {1}, 1: {0}, 2: set()},
        1: {0: {1, 2}, 1: {0}, 2: {0}},
        2: {0: set(), 1: set(), 2: set()}
    }
    assert adjacency_to_contact_events(adjacency) == [
        ContactEvent(0.0, 0, 1, True),
        ContactEvent(1.0, 0, 2, True),
        ContactEvent(2.0, 0, 1, False),
        ContactEvent(2.0, 0, 2, False)
    ]


def test_random_adjacency_is_symmetric_and_seeded():
    first = random_adjacency(8, 0.3, 5, seed=7)
    assert first == random_adjacency(8, 0.3, 5, seed=7)
    for adjacency in first.values():
        for i, neighbors in adjacency.items():
            for j in neighbors:
                assert i in adjacency[j]


#*************** Générateur et statistiques ****************
def test_message_generator():
    generator = MessageGenerator(5, interval=(2, 4), size=(100, 200), prefix='A', seed=3)
    events = generator.generate(50)
    assert events
    assert [e.id for e in events[:3]] == ['A1', 'A2', 'A3']
    for previous, event in zip(events, events[1:]):
        assert event.time - previous.time >= 2
    for event in events:
        assert event.from_id != event.to_id
        assert 100 <= event.size <= 200
        assert event.time <= 50


def test_message_generator_window():
    generator = MessageGenerator(3, interval=(1, 1), window=(10, 20), seed=1)
    events = generator.generate(100)
    assert events[0].time == 10
    assert events[-1].time <= 20


def test_message_generator_response_size():
    assert all(e.response_size == 0 for e in MessageGenerator(3, seed=1).generate(40))
    events = MessageGenerator(3, response_size=500, seed=1).generate(40)
    assert events and all(e.response_size == 500 for e in events)


def test_message_generator_needs_two_hosts():
    with pytest.raises(ValueError):
        MessageGenerator(1)


def test_empty_stats():
    stats = MessageStats()
    assert stats.delivery_ratio() == 0.0
    assert stats.overhead_ratio() == float('inf')
    assert stats.delivery_delay() == float('inf')
    assert stats.mean_hop_count() == 0.0
    assert 'delivery_prob' in stats.to_table()
    assert stats.to_dataframe().empty


#*************** Simulation complète ****************
def test_main_synthetic_run():
    stats = main(['--nodes', '6', '--connectivity', '0.4', '--steps', '40', '--seed', '3',
                  '--log-level', 'WARNING'])
    summary = stats.summary()
    assert summary['created'] > 0
    assert 0.0 <= summary['delivery_prob'] <= 1.0
    assert summary['delivered'] <= summary['created']
    assert summary['ants_returned'] <= summary['delivered']


def test_main_with_trace(tmp_path):
    path = tmp_path / "trace.csv"
    events = adjacency_to_contact_events(random_adjacency(5, 0.5, 30, seed=2))
    trace_to_dataframe(events).to_csv(path, index=False)
    stats = main(['--trace', str(path), '--steps', '30', '--centrality', 'CWindowCentrality',
                  '--log-level', 'WARNING'])
    assert stats.summary()['created'] > 0


def test_plots(tmp_path):
    world, stats = make_world(2, [ContactEvent(0, 0, 1, True)],
                              [MessageCreateEvent(0, 0, 1, 'M1', 100)], transfer_speed=250)
    world.run(5)
    plot_delivery_over_time(stats, 5, str(tmp_path / "livraisons.png"))
    assert (tmp_path / "livraisons.png").exists()

    assert plot_pheromone_heatmap(CulturalACORouter(), str(tmp_path / "vide.png")) is False
    assert not (tmp_path / "vide.png").exists()

    # La fourmi retour a renforcé l'arête 0 -> 1 à l'origine
    router = world.get_node(0).router
    assert 'M1' in stats.returned
    assert plot_pheromone_heatmap(router, str(tmp_path / "pheromones.png")) is True
    assert (tmp_path / "pheromones.png").exists()


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
