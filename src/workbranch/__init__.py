"""workbranch - work item branches and developer environment login."""
