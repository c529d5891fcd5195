"""
Visualization Utilities
=======================

This module provides functions for visualizing:
- Training progress (loss curve)
- Weight matrices as heatmaps
- The network as a node/edge diagram, edges colored by weight sign and
  sized by magnitude
- Truth-table style predictions for a built-in example
"""

import numpy as np
import matplotlib.pyplot as plt

from .examples import truth_table


def _finish(fig, save_path, what, show):
    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        print(f"{what} saved to {save_path}")

    if show:
        plt.show()
    return fig


def plot_loss_history(loss_history, figsize=(8, 5), log_scale=True, save_path=None, show=True):
    """
    Plot the per-epoch mean loss.

    Args:
        loss_history: Sequence of epoch losses
        figsize: Figure size
        log_scale: Use a logarithmic y axis
        save_path: Path to save figure
        show: Call ``plt.show()``
    """
    fig, ax = plt.subplots(figsize=figsize)

    epochs = range(1, len(loss_history) + 1)
    ax.plot(epochs, loss_history, 'b-', label='Training Loss', linewidth=2)
    if log_scale and len(loss_history) and min(loss_history) > 0:
        ax.set_yscale('log')
    ax.set_xlabel('Epoch', fontsize=12)
    ax.set_ylabel('Mean Squared Error', fontsize=12)
    ax.set_title('Training Loss', fontsize=14)
    ax.legend(fontsize=10)
    ax.grid(True, alpha=0.3)

    return _finish(fig, save_path, "Loss history plot", show)


def plot_weight_matrices(network, figsize=None, save_path=None, show=True):
    """
    Show every weight matrix as a heatmap (rows = destination neurons).

    Args:
        network: Network
        figsize: Figure size (scaled with layer count if None)
        save_path: Path to save figure
        show: Call ``plt.show()``
    """
    n_layers = len(network.weights)
    if figsize is None:
        figsize = (4 * n_layers, 4)

    fig, axes = plt.subplots(1, n_layers, figsize=figsize)
    axes = np.array(axes).flatten()

    limit = max(float(np.max(np.abs(w.data))) for w in network.weights) or 1.0
    for i, weight in enumerate(network.weights):
        im = axes[i].imshow(weight.to_numpy(), cmap='coolwarm', vmin=-limit, vmax=limit)
        axes[i].set_title(f'Layer {i} -> {i + 1} ({weight.rows}x{weight.cols})', fontsize=10)
        axes[i].set_xlabel('from neuron')
        axes[i].set_ylabel('to neuron')
    fig.colorbar(im, ax=list(axes), shrink=0.8)

    plt.suptitle('Weight Matrices', fontsize=14)

    return _finish(fig, save_path, "Weight matrices", show)


def visualize_network(network, figsize=(12, 8), show_values=False, title=None,
                      save_path=None, show=True):
    """
    Draw the architecture: neurons as circles, connections as lines.

    Blue lines are positive weights, red lines negative; line width and
    opacity grow with the weight magnitude.

    Args:
        network: Network
        figsize: Figure size
        show_values: Annotate each connection with its weight
        title: Optional title (defaults to the architecture)
        save_path: Path to save figure
        show: Call ``plt.show()``
    """
    fig, ax = plt.subplots(figsize=figsize)

    sizes = network.layer_sizes
    n_layers = len(sizes)
    max_neurons = max(sizes)

    # Neuron positions, each layer centered vertically
    positions = []
    for layer, size in enumerate(sizes):
        x = layer / (n_layers - 1)
        offset = (max_neurons - size) / 2
        positions.append([(x, (max_neurons - 1 - offset - j)) for j in range(size)])

    limit = max(float(np.max(np.abs(w.data))) for w in network.weights) or 1.0
    for layer, weight in enumerate(network.weights):
        for j in range(weight.rows):
            for i in range(weight.cols):
                value = weight.get(j, i)
                (x0, y0), (x1, y1) = positions[layer][i], positions[layer + 1][j]
                strength = abs(value) / limit
                ax.plot([x0, x1], [y0, y1],
                        color='tab:blue' if value >= 0 else 'tab:red',
                        linewidth=0.5 + 3 * strength,
                        alpha=0.2 + 0.7 * strength,
                        zorder=1)
                if show_values:
                    ax.text((x0 + x1) / 2, (y0 + y1) / 2, f'{value:.2f}',
                            fontsize=7, color='dimgray', ha='center')

    for layer, layer_positions in enumerate(positions):
        xs, ys = zip(*layer_positions)
        ax.scatter(xs, ys, s=400, c='#4a90e2', edgecolors='#2c5aa0', linewidths=2, zorder=2)
        label = 'Input' if layer == 0 else 'Output' if layer == n_layers - 1 else f'Hidden {layer}'
        ax.text(xs[0], max_neurons - 0.3, f'{label}\n({sizes[layer]})',
                ha='center', va='bottom', fontsize=10)

    ax.set_title(title or f'Network {sizes}', fontsize=14)
    ax.set_xlim(-0.1, 1.1)
    ax.set_ylim(-1, max_neurons + 0.5)
    ax.axis('off')

    return _finish(fig, save_path, "Network diagram", show)


def plot_example_predictions(network, example, figsize=(10, 5), save_path=None, show=True):
    """
    Bar chart of network outputs against targets for every example row.

    Args:
        network: Network
        example: Built-in Example
        figsize: Figure size
        save_path: Path to save figure
        show: Call ``plt.show()``
    """
    rows = truth_table(network, example)
    fig, ax = plt.subplots(figsize=figsize)

    n_out = len(rows[0].output)
    width = 0.8 / n_out
    index = np.arange(len(rows))
    for k in range(n_out):
        ax.bar(index + k * width, [row.output[k] for row in rows], width,
               label=f'output {k}', alpha=0.8)
        ax.scatter(index + k * width, [row.target[k] for row in rows],
                   marker='_', s=200, color='black', zorder=3)

    ax.set_xticks(index + 0.4 - width / 2)
    ax.set_xticklabels([','.join(f'{v:g}' for v in row.input) for row in rows],
                       rotation=45, ha='right', fontsize=8)
    ax.set_ylim(0, 1.05)
    ax.set_ylabel('Activation')
    correct = sum(row.correct for row in rows)
    ax.set_title(f'{example.name}: {correct}/{len(rows)} correct', fontsize=14)
    if n_out > 1:
        ax.legend(fontsize=8)

    return _finish(fig, save_path, "Prediction plot", show)
