"""
IBM Cloud resources and data sources.

Declarative lifecycle handlers for VPC network ACLs, bare metal server
floating IPs, instance group managers, image export jobs and Code Engine
functions, built on the IBM Cloud Python SDKs.
"""

__version__ = "0.1.0"
