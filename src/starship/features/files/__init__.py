"""Files components: folders, uploads, quotas and download tickets."""
