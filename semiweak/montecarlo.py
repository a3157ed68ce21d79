"""Monte Carlo validation: run churn simulations across seeds and report.

Run from terminal:
    python -m semiweak.montecarlo            # N_SEEDS seeds
    python -m semiweak.montecarlo 50         # 50 seeds

Results are saved to results/montecarlo.json
"""
import sys
import json
import time
import logging
import multiprocessing as mp
from pathlib import Path

import numpy as np
from tqdm.auto import tqdm

from .config import N_SEEDS, BASE_SEED, N_NODES, N_STEPS, MAX_WORKERS
from .simulator import ChurnSimulator

logger = logging.getLogger(__name__)


def ci95(arr):
    """95% confidence interval: (mean, lo, hi)."""
    arr = np.array(arr, dtype=float)
    mean = np.mean(arr)
    if len(arr) < 2:
        return mean, mean, mean
    se = np.std(arr, ddof=1) / np.sqrt(len(arr))
    return mean, mean - 1.96 * se, mean + 1.96 * se


def run_seed(args):
    """Run one simulator to completion. args = (seed, n_nodes, n_steps)."""
    seed, n_nodes, n_steps = args
    sim = ChurnSimulator(n_nodes=n_nodes, seed=seed)
    sim.run(n_steps)
    result = sim.summary()
    result['peak_weak'] = max((h['weak'] for h in sim.history), default=0)
    result['violation_kinds'] = sorted({kind for _, kind, _ in sim.violations})
    return result


def run_monte_carlo(n_seeds=N_SEEDS, base_seed=BASE_SEED, n_workers=None,
                    n_nodes=N_NODES, n_steps=N_STEPS, progress=True):
    """Run one churn simulation per seed.

    Args:
        n_seeds: number of independent seeds
        base_seed: starting seed
        n_workers: parallel workers (default: min(cpu_count, MAX_WORKERS));
            1 runs in-process
        n_nodes: instances per tree
        n_steps: churn steps per seed
        progress: show a tqdm progress bar

    Returns:
        list of dicts (one per seed), ordered by seed
    """
    if n_workers is None:
        n_workers = min(mp.cpu_count(), MAX_WORKERS)

    jobs = [(s, n_nodes, n_steps) for s in range(base_seed, base_seed + n_seeds)]
    pbar = tqdm(total=n_seeds, desc='Churn', unit='seed', disable=not progress)
    results = []
    if n_workers <= 1:
        for job in jobs:
            results.append(run_seed(job))
            pbar.update(1)
    else:
        ctx = mp.get_context('fork')
        with ctx.Pool(n_workers) as pool:
            for result in pool.imap_unordered(run_seed, jobs):
                results.append(result)
                pbar.update(1)
    pbar.close()

    results.sort(key=lambda r: r['seed'])
    n_bad = sum(1 for r in results if r['violations'])
    if n_bad:
        logger.warning('%d/%d seeds reported invariant violations', n_bad, n_seeds)
    return results


def report_monte_carlo(results):
    """Format Monte Carlo results as a printable table string."""
    n_mc = len(results)
    mc = {key: [r[key] for r in results]
          for key in ('strong', 'weak', 'collected', 'cache_size', 'peak_weak', 'violations')}

    def _fmt_ci(lo, hi, decimals=1):
        fmt = f'%.{decimals}f'
        return f'[{fmt % lo}, {fmt % hi}]'

    W_NAME, W_MEAN, W_CI = 28, 10, 20
    lines = []
    lines.append(f"{'Metric':<{W_NAME}} {'Mean':>{W_MEAN}} {'95% CI':>{W_CI}}")
    lines.append('=' * (W_NAME + W_MEAN + W_CI + 2))
    for key, label in [('strong', 'Strong refs (final)'),
                       ('weak', 'Weak refs (final)'),
                       ('peak_weak', 'Weak refs (peak)'),
                       ('collected', 'Targets collected'),
                       ('cache_size', 'Cache entries (final)')]:
        m, lo, hi = ci95(mc[key])
        lines.append(f"{label:<{W_NAME}} {m:>{W_MEAN}.1f} {_fmt_ci(lo, hi):>{W_CI}}")

    clean = sum(1 for v in mc['violations'] if v == 0)
    lines.append(f"\nSeeds without invariant violations: {clean}/{n_mc}")
    kinds = sorted({k for r in results for k in r['violation_kinds']})
    if kinds:
        lines.append(f"Violation kinds: {', '.join(kinds)}")
    return '\n'.join(lines)


# ══════════════════════════════════════════════════════════════════════
#  CLI entry point: python -m semiweak.montecarlo [n_seeds]
# ══════════════════════════════════════════════════════════════════════

def main(argv=None, output_path='results/montecarlo.json'):
    argv = sys.argv[1:] if argv is None else argv
    logging.basicConfig(level=logging.INFO,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    n_seeds = int(argv[0]) if argv else N_SEEDS
    t_start = time.time()

    results = run_monte_carlo(n_seeds=n_seeds)
    print(report_monte_carlo(results))

    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w') as f:
        json.dump({'n_seeds': n_seeds, 'n_nodes': N_NODES, 'n_steps': N_STEPS,
                   'results': results}, f, indent=2)
    logger.info('Saved → %s', output_path)
    print(f"\nTotal time: {time.time()-t_start:.0f}s")
    return 1 if any(r['violations'] for r in results) else 0


if __name__ == '__main__':
    sys.exit(main())
