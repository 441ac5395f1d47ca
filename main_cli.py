import gauss_newton_icp.local.cli_launch

if __name__ == "__main__":
    gauss_newton_icp.local.cli_launch.main()
