#!python3
"""
``mfvsnap``: check the hydrodynamics metadata of a snapshot from the command line.

See the -h invocation for more details.
"""

import argparse as ap

SCREEN_WIDTH = 80


parser = ap.ArgumentParser(
    prog="mfvsnap",
    description=(
        "Prints the hydrodynamics scheme metadata to the console, read from "
        "the snapshots that are given. Includes the scheme flavour, kernel "
        "properties, and the particle fields present."
    ),
    epilog=("Example usage:\n  mfvsnap output_0000.hdf5"),
)

parser.add_argument(
    "snapshots",
    metavar="Snapshots",
    type=str,
    nargs="+",
    help=(
        "Snapshots you wish to view metadata for. Supports standard "
        "globbing syntax, so you can do output_00{10..14}.hdf5."
    ),
)

parser.add_argument(
    "-p",
    "--parameters",
    required=False,
    default=False,
    action="store_true",
    help="Also print the run-time parameters stored in the snapshots.",
)


def mfvsnap(argv: list[str] | None = None) -> None:
    """
    Access snapshot hydrodynamics metadata from the command line.

    For details see the command line argument parser help.

    Parameters
    ----------
    argv : list[str], optional
        Command line arguments; ``sys.argv`` is used if not given.
    """
    import h5py

    from textwrap import wrap

    from swiftmfv.hydro_properties import hydro_info
    from swiftmfv.parameters import decode
    from swiftmfv.snapshot import MFVSnapshot, particle_group_name

    args = parser.parse_args(argv)

    for filename in args.snapshots:
        try:
            with h5py.File(filename, "r") as handle:
                snapshot = MFVSnapshot(filename, handle=handle)
                fields = list(handle.get(particle_group_name, {}).keys())
        except OSError:
            print(f"{filename} is not a readable HDF5 file.")
            exit(1)

        print(f"{snapshot}")
        print(f"Scale factor: a={snapshot.scale_factor:.4g}")
        print()

        if snapshot.hydro_scheme is None:
            print("No hydrodynamics scheme metadata present.")
        else:
            print(hydro_info(snapshot.hydro_scheme))
            print()

            for name, value in snapshot.hydro_scheme.items():
                if isinstance(value, (bytes, str)):
                    print(f"{name}: {decode(value)}")

        print()
        for line in wrap(f"Particle fields: {', '.join(fields)}", SCREEN_WIDTH):
            print(line)

        if args.parameters and snapshot.parameters is not None:
            print()
            print(snapshot.parameters)

        print()


if __name__ == "__main__":
    mfvsnap()
