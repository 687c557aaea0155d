#!/usr/bin/env python3
# SPDX-License-Identifier: MPL-2.0
"""
Example usage of the Amber Electric API client.

This script demonstrates how to use the AmberClient to fetch the current
price for every channel of a site and the usage for one day.
"""

import os
from datetime import date, timedelta

from amber_client.amber import AmberAPIError, AmberClient, first_record


def main():
    """Example usage of the Amber Electric API client."""

    token = os.environ.get('AMBER_API_TOKEN')
    if not token:
        print("Set AMBER_API_TOKEN to your Amber API key")
        return 1

    yesterday = date.today() - timedelta(days=1)

    with AmberClient(token) as client:
        try:
            site = first_record(client.get_sites(), "sites")
            print(f"Site {site.id} on the {site.network} network (NMI {site.nmi})\n")

            for price in client.get_current_prices(site.id):
                print(f"  {price.channel_type}: {price.per_kwh:.2f}c/kWh "
                      f"({price.descriptor}, spike: {price.spike_status})")

            usage = client.get_usage(site.id, yesterday, yesterday)
            print(f"\nRetrieved {len(usage)} usage intervals for {yesterday}")

            if usage:
                total_kwh = sum(u.kwh for u in usage)
                total_cost = sum(u.cost_cents for u in usage)
                print(f"  Total: {total_kwh:.3f} kWh, {total_cost:.2f}c")
                if total_kwh:
                    print(f"  Average: {total_cost / total_kwh:.2f}c/kWh")

        except AmberAPIError as e:
            print(f"Error fetching data: {e}")
            return 1

    return 0


if __name__ == "__main__":
    exit(main())
