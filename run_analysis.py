#!/usr/bin/env python3
"""
StrayLight: Region Statistics & Scattered-Light Estimate
========================================================

Description:
    Command-line front end for the straylight_tool package. It loads solar
    image maps with sunpy, obtains the point of interest (from the command
    line or, interactively, from the terminal) and prints the results.

    Sub-commands:
    1.  **region:** mean / median / pixel count inside an annulus, disk or box
        around a point of one map.
    2.  **calibrate:** compares a partial-field map A with a full-disk map B of
        another instrument, corrects for solar rotation between the two
        observation times, and reports the inferred full-disk intensity of A
        and its scale factor against the reference level.

Usage Examples:
    1. Annulus statistics around a point (arcsec):
       python3 run_analysis.py region aia_1700.fits --x -250 --y 310 --inner 5 --outer 20

    2. Box statistics, point typed in interactively:
       python3 run_analysis.py region hmi_ic.fits --box 30

    3. Cross-calibration against a full-disk AIA frame:
       python3 run_analysis.py calibrate ibis_scan.fits aia_1700.fits --x -240 --y 300 \
           --half-width 10 --config params.txt
"""

import argparse
import logging
import sys

import sunpy.map

from straylight_tool import config, selection
from straylight_tool.imagemap import ImageMap
from straylight_tool.statistics import annulus_statistics, box_statistics, disk_statistics
from straylight_tool.alignment import align_and_compare


def ask_point(msg="Point of interest in arcsec, as 'x y'"):
    """
    Interactively asks the user for a coordinate pair.
    An empty answer cancels the selection.
    """
    while True:
        ans = input(f"{msg}: ").strip()
        if not ans: return None
        parts = ans.replace(",", " ").split()
        try:
            if len(parts) == 2: return float(parts[0]), float(parts[1])
        except ValueError:
            pass
        print("Please answer with two numbers, e.g. '-250 310'.")


def load_map(path):
    """Reads a FITS file through sunpy and converts it to an ImageMap."""
    return ImageMap.from_sunpy_map(sunpy.map.Map(path))


def get_point(args):
    if args.x is not None and args.y is not None:
        return selection.as_point((args.x, args.y))
    return selection.acquire_point(ask_point)


def run_region(args, cfg):
    mp = load_map(args.map)
    point = get_point(args)
    if args.box:
        w = args.box[0]; h = args.box[1] if len(args.box) > 1 else None
        sample = box_statistics(mp, point, w, h)
        label = f"box {sample.geometry.width:g} x {sample.geometry.height:g} arcsec"
    elif args.radius is not None:
        sample = disk_statistics(mp, point, args.radius)
        label = f"disk r <= {args.radius:g} arcsec"
    else:
        inner = config.config_value(cfg, "ANNULUS_INNER", args.inner)
        outer = config.config_value(cfg, "ANNULUS_OUTER", args.outer)
        sample = annulus_statistics(mp, point, inner, outer)
        label = f"annulus {inner:g} < r <= {outer:g} arcsec"

    st = sample.statistics
    print(f"\n--- Region: {label} at ({point[0]:.2f}, {point[1]:.2f}) ---")
    print(f"   Map    : {args.map} [{mp.instrument_id or 'unknown'}]")
    print(f"   Count  : {st.count}")
    print(f"   Mean   : {st.mean:.6g}")
    print(f"   Median : {st.median:.6g}")


def run_calibrate(args, cfg):
    map_a = load_map(args.map_a)
    map_b = load_map(args.map_b)
    point = get_point(args)
    res = align_and_compare(map_a, map_b, args.half_width, point,
                            dark_offset=args.dark, intensity_scale=args.scale,
                            reference_intensity=args.reference,
                            radius_fraction=args.radius_fraction, config=cfg)

    print(f"\n--- Cross-Calibration: {map_a.instrument_id or 'A'} vs {map_b.instrument_id or 'B'} ---")
    print(f"   Rotation shift (arcsec)       : ({res.rotation_shift[0]:.2f}, {res.rotation_shift[1]:.2f})")
    print(f"   Box A center / Box B center   : {res.box_a.center} / "
          f"({res.box_b.center[0]:.2f}, {res.box_b.center[1]:.2f})")
    print(f"   Intensity A (box)             : {res.intensity_a:.6g}")
    print(f"   Intensity B (box)             : {res.intensity_b:.6g}")
    print(f"   Full-disk intensity B         : {res.full_disk_intensity_b:.6g}")
    print(f"   Inferred full-disk intensity A: {res.inferred_full_disk_intensity_a:.6g}")
    print(f"   Scale factor vs reference     : {res.scale_factor:.6g}")
    if res.partial_frame_warning:
        print(f"   [WARN] Partial frame: {res.invalid_count} invalid pixels in overlap region")


def main(argv=None):
    # --- Argument Parsing ---
    parser = argparse.ArgumentParser(description="StrayLight Analysis Tool")
    parser.add_argument("--config", type=str, default=None, help="Path to params.txt configuration file")
    parser.add_argument("--verbose", action="store_true", help="Print debug messages")
    sub = parser.add_subparsers(dest="command", required=True)

    p_reg = sub.add_parser("region", help="Statistics of a region around a point")
    p_reg.add_argument("map", help="FITS image")
    p_reg.add_argument("--x", type=float, help="Point x (arcsec)")
    p_reg.add_argument("--y", type=float, help="Point y (arcsec)")
    shape = p_reg.add_mutually_exclusive_group()
    shape.add_argument("--box", type=float, nargs="+", metavar="W [H]", help="Box width (and height), arcsec")
    shape.add_argument("--radius", type=float, help="Disk radius, arcsec")
    p_reg.add_argument("--inner", type=float, help="Annulus inner radius (exclusive), arcsec")
    p_reg.add_argument("--outer", type=float, help="Annulus outer radius (inclusive), arcsec")

    p_cal = sub.add_parser("calibrate", help="Scattered-light scale factor from a full-disk reference")
    p_cal.add_argument("map_a", help="Partial-field FITS image to calibrate")
    p_cal.add_argument("map_b", help="Full-disk reference FITS image")
    p_cal.add_argument("--x", type=float, help="Box center x in map A (arcsec)")
    p_cal.add_argument("--y", type=float, help="Box center y in map A (arcsec)")
    p_cal.add_argument("--half-width", type=float, default=None, help="Box half width (arcsec)")
    p_cal.add_argument("--dark", type=float, default=None, help="Dark level subtracted from map A")
    p_cal.add_argument("--scale", type=float, default=None, help="Intensity scale applied to map A")
    p_cal.add_argument("--reference", type=float, default=None, help="Reference full-disk intensity")
    p_cal.add_argument("--radius-fraction", type=float, default=None, help="Full-disk radius (Rsun)")

    args = parser.parse_args(argv)
    sub_parser = p_reg if args.command == "region" else p_cal
    if (args.x is None) != (args.y is None):
        sub_parser.error("--x and --y must be given together")
    if args.command == "region" and (args.box or args.radius is not None) \
            and (args.inner is not None or args.outer is not None):
        sub_parser.error("--inner/--outer cannot be combined with --box or --radius")
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    print(f"--- StrayLight Analysis ---")
    cfg = config.load_config(args.config)
    if args.config: print(f"Using Config File: {args.config}")

    # --- Execution Phase ---
    try:
        if args.command == "region":
            run_region(args, cfg)
        else:
            run_calibrate(args, cfg)
        print("\n[DONE] Run complete.")
    except ValueError as e:
        print(f"\n[ERROR] {e}")
        print("Tip: Check the point coordinates, map headers and params.txt values.")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
