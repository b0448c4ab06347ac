"""
Airgraph -- Passive 802.11 Association Graph
=============================================

Airgraph listens to 802.11 management traffic and builds a graph of
wireless networks and client devices.  Beacons announce networks,
probe requests reveal which networks a device is looking for, and each
probe links the probing device to the probed network.  Every updated
node is persisted as a JSON line.

Modules:
    core.engine     -- Capture orchestration and the single graph consumer
    core.graph      -- Node graph with upsert and probe association
    core.models     -- Observations, nodes, bounded histories, errors
    core.sink       -- Node record persistence
    collectors      -- Scapy capture and frame adaptation
    analyzers       -- Association and signal analysis
    output          -- Console and report output
    cli             -- Click-based command-line interface

References:
    - IEEE. (2020). IEEE Std 802.11-2020: Wireless LAN MAC and PHY
      Specifications.
    - Vanhoef, M., et al. (2016). Why MAC Address Randomization is
      Not Enough: An Analysis of Wi-Fi Probe Requests. AsiaCCS.
"""

__version__ = "1.0.0"
__tool__ = "Airgraph"
__description__ = "Passive 802.11 association graph"
