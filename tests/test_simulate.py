import csv

import matplotlib
matplotlib.use('Agg')

from mphe.utils import STATUS, simulate_network_comm
from mphe.scheme import Params
from mphe.simulate import Simulation
from mphe import plotter

from conftest import SMUDGING_SIGMA


SMALL = Params(logN=6, q=998244353, t=16, sigma=3.2)


def test_round_succeeds():
    sim = Simulation(3, SMUDGING_SIGMA, params=SMALL, seed=1)
    status, noise = sim.run_round()

    assert STATUS.success(status)
    assert noise < sim.context.delta // 2


def test_each_party_owns_its_protocol():
    sim = Simulation(3, SMUDGING_SIGMA, params=SMALL, seed=1)
    protocols = [ party.protocol for party in sim.parties ]
    assert len(set(map(id, protocols))) == 3
    assert sim.combiner.protocol not in protocols


def test_shares_survive_transport():
    sim = Simulation(2, SMUDGING_SIGMA, params=SMALL, seed=2)
    share = sim.parties[0].gen_pcks_share(sim.target_pk, sim.encryptor.encrypt([1]))
    assert simulate_network_comm(share) == share


def test_run_writes_csv_and_plot(tmp_path):
    csv_path = str(tmp_path / 'curves' / 'pcks.csv')

    results = Simulation(2, SMUDGING_SIGMA, params=SMALL, seed=4).run(3, csv_path)
    Simulation(2, 0.0, params=SMALL, seed=5).run(2, csv_path)

    assert len(results) == 3
    assert all(row[3] == 1 for row in results)

    with open(csv_path, newline='') as csv_file:
        rows = list(csv.reader(csv_file))
    assert len(rows) == 5
    assert rows[0][0] == '2'

    curves = plotter.load_noise_curves(csv_path)
    assert set(curves) == {(2, SMUDGING_SIGMA), (2, 0.0)}

    png = plotter.plot_noise(csv_path, show=False)
    assert (tmp_path / 'curves' / 'pcks.png').exists()
    assert png.endswith('pcks.png')
