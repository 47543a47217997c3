# main.py
import argparse
import copy
import logging
import os
import random

from config import CONFIG, ROUTER_NS, ensure_outdir
from data.loader import adjacency_to_contact_events, load_contact_trace, random_adjacency
from protocols.centrality import CENTRALITY_ALGORITHMS
from protocols.cultural_aco import CulturalACORouter, CulturalACOSettings
from simulation.generator import MessageGenerator
from simulation.metrics import MessageStats
from simulation.visualize import plot_delivery_over_time, plot_pheromone_heatmap
from simulation.world import World

logger = logging.getLogger(__name__)


def parse_arguments(argv=None):
    """Parse les arguments de ligne de commande."""
    parser = argparse.ArgumentParser(description="Simulation du routage Cultural ACO dans un réseau opportuniste")
    parser.add_argument('--trace', type=str, default=CONFIG['trace'],
                        help='Trace de contacts CSV (time,node_a,node_b,state)')
    parser.add_argument('--nodes', type=int, default=CONFIG['synthetic']['nodes'],
                        help='Nombre de nœuds de la topologie synthétique')
    parser.add_argument('--connectivity', type=float, default=CONFIG['synthetic']['connectivity'],
                        help='Probabilité de lien de la topologie synthétique')
    parser.add_argument('--steps', type=int, default=CONFIG['simulation']['end_time'],
                        help='Durée de la simulation (pas de temps)')
    parser.add_argument('--centrality', type=str, choices=sorted(CENTRALITY_ALGORITHMS),
                        default=CONFIG[ROUTER_NS]['centralityAlg'],
                        help='Algorithme de centralité globale')
    parser.add_argument('--evaporation', type=float, default=CONFIG[ROUTER_NS]['evaporationRate'],
                        help="Taux d'évaporation de la phéromone")
    parser.add_argument('--alpha', type=float, default=CONFIG[ROUTER_NS]['alpha'],
                        help='Poids de la phéromone')
    parser.add_argument('--beta', type=float, default=CONFIG[ROUTER_NS]['beta'],
                        help="Poids de l'utilité")
    parser.add_argument('--seed', type=int, default=CONFIG['simulation']['seed'],
                        help='Graine aléatoire')
    parser.add_argument('--plot', action='store_true',
                        help='Enregistre les graphiques et le détail CSV dans OUTDIR')
    parser.add_argument('--progress', action='store_true',
                        help='Affiche une barre de progression')
    parser.add_argument('--log-level', type=str, default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Niveau de journalisation')
    return parser.parse_args(argv)


def build_config(args):
    """Applique les arguments de ligne de commande à une copie de CONFIG."""
    config = copy.deepcopy(CONFIG)
    config[ROUTER_NS].update({
        'centralityAlg': args.centrality,
        'evaporationRate': args.evaporation,
        'alpha': args.alpha,
        'beta': args.beta
    })
    return config


def main(argv=None):
    """Point d'entrée principal du programme."""
    args = parse_arguments(argv)

    # Configuration du logging
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    config = build_config(args)
    settings = CulturalACOSettings.from_config(config)
    logger.info("### Routage Cultural ACO - centralité %s, ρ=%.2f, α=%.2f, β=%.2f ###",
                settings.centrality_alg, settings.evaporation_rate, settings.alpha, settings.beta)

    # Chargement des contacts
    if args.trace:
        contact_events, num_nodes = load_contact_trace(args.trace)
    else:
        num_nodes = args.nodes
        adjacency = random_adjacency(num_nodes, args.connectivity, args.steps, seed=args.seed)
        contact_events = adjacency_to_contact_events(adjacency)

    gen_config = config['generator']
    generator = MessageGenerator(num_nodes, interval=gen_config['interval'], size=gen_config['size'],
                                 prefix=gen_config['prefix'], window=gen_config['window'],
                                 response_size=gen_config['response_size'],
                                 seed=args.seed)
    message_events = generator.generate(args.steps)

    stats = MessageStats()
    world = World.from_prototype(
        num_nodes, CulturalACORouter(settings, rng=random.Random(args.seed)),
        contact_events=contact_events,
        message_events=message_events,
        transfer_speed=config['simulation']['transfer_speed'],
        tick=config['simulation']['tick'],
        seed=args.seed,
        listeners=[stats]
    )
    world.run(args.steps, progress=args.progress)

    print(stats.to_table())

    if args.plot:
        outdir = ensure_outdir('cultural_aco')
        plot_delivery_over_time(stats, args.steps, os.path.join(outdir, 'livraisons.png'))
        busiest = max(world.nodes.values(), key=lambda n: len(n.router.pheromone_table))
        plot_pheromone_heatmap(busiest.router, os.path.join(outdir, f'pheromones_{busiest.id}.png'))
        stats.to_dataframe().to_csv(os.path.join(outdir, 'messages.csv'), index=False)
        logger.info("Résultats sauvegardés dans %s", outdir)

    return stats


if __name__ == "__main__":
    main()
