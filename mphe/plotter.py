import os, csv, sys

import matplotlib
from matplotlib import pyplot as plt

import numpy as np

# Reads rows of (num_parties, sigma_smudging, noise, success) written by simulate.py
def load_noise_curves(data_path):
    curves = {}

    with open(data_path, newline='') as csv_file:
        reader = csv.reader(csv_file)
        for row in reader:
            if not row:
                continue
            num_parties, sigma, noise, success = int(row[0]), float(row[1]), int(row[2]), int(row[3])
            curves.setdefault((num_parties, sigma), []).append((noise, success))

    return curves

# Plot log2 of the decryption noise per round, one curve per (N, sigma)
def plot_noise(data_path, show=True):
    curves = load_noise_curves(data_path)

    title = os.path.basename(data_path)
    title = os.path.splitext(title)[0]

    fig = plt.figure()

    for (num_parties, sigma), points in sorted(curves.items()):
        noise = np.array([ p[0] for p in points ], dtype=np.float64)
        plt.plot(range(len(noise)), np.log2(np.maximum(noise, 1)), marker='o',
            label='N={} sigma={:g}'.format(num_parties, sigma))

    plt.xlabel('Round')
    plt.ylabel('log2(noise)')

    plt.title(title)
    plt.legend(loc='best')
    plt.grid(True)

    out_path = os.path.splitext(data_path)[0] + '.png'
    plt.savefig(out_path, bbox_inches='tight')

    if show:
        plt.show()
    plt.close(fig)

    return out_path

if __name__ == '__main__':
    if len(sys.argv) < 2:
        sys.stdout.write('usage: python -m mphe.plotter <csv_path>\n')
        sys.exit(1)

    plot_noise(sys.argv[1])
