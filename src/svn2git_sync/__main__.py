from svn2git_sync.cli import run

run()
