"""Command-line driver: run the verification checks and write JSON.

Ranks are threads of this process by default, or MPI processes with ``--mpi``:

    python -m graphcheck.harness.runner --workers 4 --scale 8 --weighted --out results.json
    mpirun -n 4 python -m graphcheck.harness.runner --mpi --scale 8 --out results.json
"""

import json
from pathlib import Path

from ..algorithms.centrality import KERNELS
from ..core._Types import TYPE_COMBOS
from ..distributed.comms import MpiComms, run_workers
from .context import ExecutionContext
from .usecases import AlgorithmUsecase, FileUsecase, GraphUsecase, RmatUsecase, override_usecase
from .verify import verify_distributed_algorithm, verify_graph_construction

CHECKS = ("graph_construction",) + tuple(KERNELS)


def run_check(
    check,
    input_usecase,
    *,
    workers=1,
    types=TYPE_COMBOS["int32_int32_float32"],
    graph_usecase=None,
    algorithm_usecase=None,
    store_transposed=False,
    seed=0,
    perf=False,
    timeout=None,
    comms=None,
):
    """Run one check and return the coordinator's result as a dict.

    Without ``comms`` the check runs on ``workers`` in-process ranks. With an
    MPI communicator every process runs its own rank and the results are
    allgathered, so every process returns the same dict.
    """
    graph_usecase = graph_usecase or GraphUsecase()
    algorithm_usecase = algorithm_usecase or AlgorithmUsecase()

    def body(comms):
        with ExecutionContext(comms, seed=seed, perf=perf) as ctx:
            if check == "graph_construction":
                result = verify_graph_construction(
                    ctx,
                    graph_usecase,
                    input_usecase,
                    types=types,
                    store_transposed=store_transposed,
                    raise_on_failure=False,
                )
            else:
                result = verify_distributed_algorithm(
                    ctx,
                    algorithm_usecase,
                    input_usecase,
                    KERNELS[check],
                    types=types,
                    store_transposed=store_transposed,
                    multigraph=graph_usecase.multigraph,
                    raise_on_failure=False,
                )
        return result, dict(ctx.timer.timings), ctx.timer.report()

    if comms is None:
        outputs = run_workers(workers, body, timeout=timeout)
    else:
        try:
            local = body(comms)
        except Exception:
            comms.abort()
            raise
        outputs = comms.allgather(local)
    result, timings, summary = outputs[_coordinator_index(outputs)]
    out = result.to_dict()
    if perf:
        out["timings"] = timings
        out["timing_summary"] = summary.splitlines()
    return out


def _coordinator_index(outputs):
    """Index of the rank that returned a result."""
    for rank, (result, *_) in enumerate(outputs):
        if result is not None:
            return rank
    raise RuntimeError("no rank returned a verification result")


def run(args, comms=None):
    types = TYPE_COMBOS[args.types]
    if args.file:
        input_usecase = FileUsecase(args.file)
    else:
        input_usecase = override_usecase(
            RmatUsecase(),
            {
                "scale": args.scale,
                "edge_factor": args.edge_factor,
                "seed": args.seed,
                "undirected": args.undirected,
                "scramble": args.scramble,
                "multigraph": args.multigraph,
            },
        )
    graph_usecase = override_usecase(
        GraphUsecase(), {"test_weighted": args.weighted, "multigraph": args.multigraph}
    )
    algorithm_usecase = override_usecase(
        AlgorithmUsecase(),
        {
            "num_seeds": args.num_seeds,
            "normalized": args.normalized,
            "include_endpoints": args.include_endpoints,
            "test_weighted": args.weighted,
            "tolerance": args.tolerance,
            "rtol": args.rtol,
        },
    )

    results = {
        "workers": args.workers if comms is None else comms.size,
        "mpi": comms is not None,
        "types": args.types,
        "store_transposed": args.transposed,
        "input": repr(input_usecase),
        "checks": {},
    }
    for check in args.checks or CHECKS:
        try:
            results["checks"][check] = run_check(
                check,
                input_usecase,
                workers=args.workers,
                types=types,
                graph_usecase=graph_usecase,
                algorithm_usecase=algorithm_usecase,
                store_transposed=args.transposed,
                seed=args.seed or 0,
                perf=args.perf,
                timeout=args.timeout,
                comms=comms,
            )
        except Exception as e:
            results["checks"][check] = {
                "name": check,
                "passed": False,
                "error": f"{type(e).__name__}: {e}",
            }
    results["passed"] = all(c["passed"] for c in results["checks"].values())
    return results


def build_parser():
    import argparse

    p = argparse.ArgumentParser(prog="python -m graphcheck.harness.runner")
    p.add_argument("--workers", type=int, default=2, help="in-process ranks (ignored with --mpi)")
    p.add_argument("--mpi", action="store_true", help="one rank per MPI process (launch with mpirun)")
    p.add_argument("--checks", nargs="*", choices=CHECKS)
    p.add_argument("--types", default="int32_int32_float32", choices=sorted(TYPE_COMBOS))
    p.add_argument("--file", help="Matrix Market input; R-MAT is generated when omitted")
    p.add_argument("--scale", type=int)
    p.add_argument("--edge-factor", type=int)
    p.add_argument("--seed", type=int)
    p.add_argument("--undirected", action="store_true", default=None)
    p.add_argument("--scramble", action="store_true", default=None)
    p.add_argument("--multigraph", action="store_true", default=None)
    p.add_argument("--weighted", action="store_true", default=None)
    p.add_argument("--transposed", action="store_true")
    p.add_argument("--num-seeds", type=int)
    p.add_argument("--normalized", action="store_true", default=None)
    p.add_argument("--include-endpoints", action="store_true", default=None)
    p.add_argument("--tolerance", type=float)
    p.add_argument("--rtol", type=float)
    p.add_argument("--perf", action="store_true")
    p.add_argument("--timeout", type=float, help="seconds a rank waits in a collective (in-process ranks only)")
    p.add_argument("--out", default="graphcheck_results.json")
    return p


def main(argv=None):
    args = build_parser().parse_args(argv)
    comms = MpiComms() if args.mpi else None
    res = run(args, comms)
    if comms is None or comms.rank == 0:
        Path(args.out).write_text(json.dumps(res, indent=2))
        print(f"Wrote {args.out} ({'passed' if res['passed'] else 'FAILED'})")
    return 0 if res["passed"] else 1


if __name__ == "__main__":
    raise SystemExit(main())
