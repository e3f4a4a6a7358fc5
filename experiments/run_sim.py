import numpy as np

from linucb.config import BanditConfig, build_bandit
from linucb.sim.runner import run_rounds, windowed_selection_rate
from linucb.sim.user_models import click_scenario

def main(config: BanditConfig = None):
    config = config or BanditConfig.from_env()
    user = click_scenario(seed=config.seed)
    bandit = build_bandit(config, d=user.d)

    history = run_rounds(bandit, user, config.rounds)
    rates = windowed_selection_rate(history, arm=1, context=[1.0, 0.0], window=config.window)

    print(f"T={config.rounds}, d={user.d}, arms={user.arms}, alpha={config.alpha}")
    print(f"Avg reward (all):     {np.mean([h.reward for h in history]):.4f}")
    print(f"Avg reward (last 10%): {np.mean([h.reward for h in history[int(0.9*config.rounds):]]):.4f}")
    print("P(select arm 1 | x=[1,0]) per window:")
    for i, r in enumerate(rates):
        print(f"  [{i*config.window:4d}, {(i+1)*config.window:4d})  {r:.2f}")
    for arm in bandit.arms:
        print(f"theta[{arm}] = {np.round(bandit.theta(arm), 3)}  pulls={bandit.pulls(arm)}")

if __name__ == "__main__":
    main()
