"""Command line entry point for training and inspecting networks."""

import argparse
import logging
import sys

from tqdm import tqdm

from .checkpoint import load_checkpoint
from .errors import CheckpointIOError, NeuralNetError
from .examples import EXAMPLES, get_example, truth_table
from .network import Network
from .training import run_training
from .utils import parse_vector

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = 'checkpoint.json'


class ProgressBar:
    """Progress sink that advances a tqdm bar once per reported epoch."""

    def __init__(self, total, desc='Training', disable=False):
        self.bar = tqdm(total=total, desc=desc, unit='epoch', disable=disable)
        self.last_epoch = 0

    def __call__(self, epoch, loss):
        self.bar.update(epoch - self.last_epoch)
        self.bar.set_postfix({'loss': f'{loss:.6f}'})
        self.last_epoch = epoch

    def close(self):
        self.bar.close()


def _progress_every(epochs):
    return max(1, epochs // 100)


def _train(network, example, epochs, args, seed=None):
    sink = ProgressBar(epochs, desc=example.name, disable=args.quiet)
    try:
        result = run_training(
            network, example, epochs, sink,
            progress_every=_progress_every(epochs),
            checkpoint_path=args.output,
            checkpoint_interval=getattr(args, 'checkpoint_interval', None),
            seed=seed,
        )
    finally:
        sink.close()
    return result


def _print_truth_table(network, example):
    rows = truth_table(network, example)
    print(f"\n{'Input':<28} {'Target':<20} {'Output':<28}")
    print("-" * 80)
    for row in rows:
        inputs = ', '.join(f'{v:g}' for v in row.input)
        targets = ', '.join(f'{v:g}' for v in row.target)
        outputs = ', '.join(f'{v:.4f}' for v in row.output)
        mark = 'ok' if row.correct else 'MISS'
        print(f"[{inputs}]".ljust(29) + f"[{targets}]".ljust(21)
              + f"[{outputs}]".ljust(29) + mark)
    correct = sum(row.correct for row in rows)
    print(f"\nAccuracy: {correct}/{len(rows)} ({correct / len(rows):.2%})")


def _report(result, example):
    print(f"\nTraining {result.status.value} after {result.epochs_completed} epochs")
    if result.final_loss is not None:
        print(f"Final loss: {result.final_loss:.6f}")
    _print_truth_table(result.network, example)
    if result.checkpoint_path:
        print(f"\nCheckpoint saved to {result.checkpoint_path}")


def cmd_train(args):
    example = get_example(args.example)
    epochs = args.epochs if args.epochs is not None else example.epochs
    learning_rate = (args.learning_rate if args.learning_rate is not None
                     else example.learning_rate)
    seed = args.seed if args.seed is not None else example.seed

    network = Network(example.recommended_arch, learning_rate=learning_rate, seed=seed)
    print(f"Training '{example.name}': {example.description}")
    print(f"Architecture {network.layer_sizes}, lr={learning_rate}, "
          f"epochs={epochs}, seed={seed}")

    result = _train(network, example, epochs, args, seed=seed)
    _report(result, example)
    return 0


def cmd_resume(args):
    network, metadata = load_checkpoint(args.checkpoint)
    if not metadata.example:
        raise CheckpointIOError(
            f"Checkpoint '{args.checkpoint}' does not name an example to resume")
    example = get_example(metadata.example)
    if args.output is None:
        args.output = args.checkpoint

    print(f"Resuming training of '{example.name}' from {args.checkpoint} "
          f"(previous run: {metadata.epoch}/{metadata.total_epochs} epochs)")
    result = _train(network, example, args.epochs, args, seed=metadata.seed)
    _report(result, example)
    return 0


def cmd_eval(args):
    network, _ = load_checkpoint(args.model)
    inputs = parse_vector(args.input)
    outputs = network.evaluate(inputs)
    print(f"Input: {inputs}")
    print(f"Output: [{', '.join(f'{v:.6f}' for v in outputs)}]")
    return 0


def cmd_info(args):
    network, metadata = load_checkpoint(args.model)
    print(network.summary())
    print(f"Example:        {metadata.example or '-'}")
    print(f"Epochs trained: {metadata.epoch}/{metadata.total_epochs}")
    print(f"Learning rate:  {metadata.learning_rate}")
    print(f"Seed:           {metadata.seed if metadata.seed is not None else '-'}")
    print(f"Saved at:       {metadata.timestamp}")
    return 0


def cmd_examples(args):
    print(f"{'Name':<12} {'Architecture':<14} {'Epochs':>7} {'LR':>5}  Description")
    print("-" * 80)
    for example in EXAMPLES.values():
        arch = '-'.join(str(n) for n in example.recommended_arch)
        print(f"{example.name:<12} {arch:<14} {example.epochs:>7} "
              f"{example.learning_rate:>5}  {example.description}")
    return 0


def cmd_visualize(args):
    import matplotlib
    matplotlib.use('Agg')
    from .visualizations import visualize_network

    network, metadata = load_checkpoint(args.checkpoint)
    title = f"{metadata.example or 'network'} {network.layer_sizes}"
    visualize_network(network, title=title, show_values=args.values,
                      save_path=args.output, show=False)
    return 0


def build_parser():
    parser = argparse.ArgumentParser(prog='neuralnet', description=__doc__)
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    train = subparsers.add_parser('train', help='Train a network on a built-in example')
    train.add_argument('--example', required=True, help='Example name (see `examples`)')
    train.add_argument('--epochs', type=int, help='Epochs (default: example recommendation)')
    train.add_argument('--learning-rate', type=float, help='Learning rate')
    train.add_argument('--seed', type=int, help='Weight initialization seed')
    train.add_argument('--output', default=DEFAULT_OUTPUT, help='Checkpoint file to write')
    train.add_argument('--checkpoint-interval', type=int,
                       help='Also write the checkpoint every N epochs')
    train.add_argument('--quiet', action='store_true', help='Hide the progress bar')
    train.set_defaults(func=cmd_train)

    resume = subparsers.add_parser('resume', help='Continue training from a checkpoint')
    resume.add_argument('--checkpoint', required=True, help='Checkpoint to resume')
    resume.add_argument('--epochs', type=int, required=True, help='Additional epochs')
    resume.add_argument('--output', help='Checkpoint file to write (default: overwrite)')
    resume.add_argument('--quiet', action='store_true', help='Hide the progress bar')
    resume.set_defaults(func=cmd_resume)

    evaluate = subparsers.add_parser('eval', help='Evaluate a trained network on one input')
    evaluate.add_argument('--model', required=True, help='Checkpoint file')
    evaluate.add_argument('--input', required=True, help='Comma separated input, e.g. "1,0"')
    evaluate.set_defaults(func=cmd_eval)

    info = subparsers.add_parser('info', help='Show checkpoint metadata and architecture')
    info.add_argument('--model', required=True, help='Checkpoint file')
    info.set_defaults(func=cmd_info)

    examples = subparsers.add_parser('examples', help='List built-in examples')
    examples.set_defaults(func=cmd_examples)

    visualize = subparsers.add_parser('visualize', help='Draw a network diagram to an image')
    visualize.add_argument('--checkpoint', required=True, help='Checkpoint file')
    visualize.add_argument('--output', required=True, help='Image file, e.g. network.png')
    visualize.add_argument('--values', action='store_true', help='Annotate weights')
    visualize.set_defaults(func=cmd_visualize)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        return args.func(args)
    except (NeuralNetError, ValueError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130


if __name__ == '__main__':
    sys.exit(main())
